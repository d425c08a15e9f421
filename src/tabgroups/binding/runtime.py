"""Static runtime program and stylesheet injected into the host UI document."""

from __future__ import annotations

BINDINGS_PLACEHOLDER = "__TABGROUPS_BINDINGS__"
GROUP_ATTRIBUTE = "data-tabgroups-group"
COLOR_PROPERTY = "--tabgroups-color"
CHIP_CLASS = "tabgroups-chip"
DECORATED_CLASS = "tabgroups-decorated"
CHIP_TEXT_COLOR = "#f0f0f0"

RUNTIME_SCRIPT = r'''(function () {
  "use strict";

  const BINDINGS = __TABGROUPS_BINDINGS__;
  const TAB_SELECTOR = ".tabs-container .tab";
  const GROUP_ATTRIBUTE = "data-tabgroups-group";
  const COLOR_PROPERTY = "--tabgroups-color";
  const CHIP_CLASS = "tabgroups-chip";
  const DECORATED_CLASS = "tabgroups-decorated";
  const OBSERVE_OPTIONS = {
    childList: true,
    subtree: true,
    attributes: true,
    attributeFilter: ["title", "aria-label"]
  };

  function currentTabs() {
    return Array.from(document.querySelectorAll(TAB_SELECTOR));
  }

  function tabLabels(tab) {
    const labels = [tab.getAttribute("title"), tab.getAttribute("aria-label")];
    const inner = tab.querySelector(".monaco-icon-label");
    if (inner) {
      labels.push(inner.getAttribute("title"), inner.getAttribute("aria-label"));
    }
    return labels.filter(Boolean).map(label => label.replace(/\\/g, "/"));
  }

  function tabName(tab) {
    const name = tab.querySelector(".label-name");
    return name ? name.textContent.trim() : "";
  }

  // Labels carry suffixes such as " • Modified" or ", Editor Group 1".
  const BEFORE_PATH = /[\s,(]/;
  const AFTER_PATH = /[\s,)\u2022]/;

  function containsSegment(label, needle, anchored) {
    let index = label.indexOf(needle);
    while (index !== -1) {
      const end = index + needle.length;
      const startsClean = !anchored || index === 0 || BEFORE_PATH.test(label.charAt(index - 1));
      const endsClean = end === label.length || AFTER_PATH.test(label.charAt(end));
      if (startsClean && endsClean) {
        return true;
      }
      index = label.indexOf(needle, index + 1);
    }
    return false;
  }

  function matchesPath(tab, binding) {
    return tabLabels(tab).some(label => containsSegment(label, binding.pathLabel, true));
  }

  // A tab advertising some other path with this base name belongs to another file.
  function matchesName(tab, binding) {
    if (tabName(tab) !== binding.basename) {
      return false;
    }
    return !tabLabels(tab).some(label => containsSegment(label, "/" + binding.basename, false));
  }

  function matchTab(tabs, binding, claimed, test) {
    return tabs.find(tab => !claimed.has(tab) && test(tab, binding)) || null;
  }

  function decorate(tab) {
    tab.classList.add(DECORATED_CLASS);
  }

  function unbind(tab) {
    tab.removeAttribute(GROUP_ATTRIBUTE);
    tab.style.removeProperty(COLOR_PROPERTY);
    tab.querySelectorAll("." + CHIP_CLASS).forEach(chip => chip.remove());
  }

  function bind(tab, binding) {
    tab.setAttribute(GROUP_ATTRIBUTE, binding.groupName);
    tab.style.setProperty(COLOR_PROPERTY, binding.color);
    const chip = document.createElement("span");
    chip.className = CHIP_CLASS;
    chip.textContent = binding.groupName;
    tab.appendChild(chip);
  }

  function apply() {
    const tabs = currentTabs();
    tabs.forEach(decorate);
    tabs.forEach(unbind);
    // Every full-path match is settled before any base-name fallback runs.
    const claimed = new Set();
    const unmatched = [];
    BINDINGS.forEach(binding => {
      const tab = matchTab(tabs, binding, claimed, matchesPath);
      if (tab) {
        claimed.add(tab);
        bind(tab, binding);
      } else {
        unmatched.push(binding);
      }
    });
    unmatched.forEach(binding => {
      const tab = matchTab(tabs, binding, claimed, matchesName);
      if (tab) {
        claimed.add(tab);
        bind(tab, binding);
      }
    });
  }

  function touchesTabs(node) {
    if (!node || node.nodeType !== 1) {
      return false;
    }
    return node.matches(".tab") || node.querySelector(".tab") !== null;
  }

  function isRelevant(mutation) {
    if (mutation.type === "attributes") {
      return touchesTabs(mutation.target) || mutation.target.closest(".tab") !== null;
    }
    const nodes = Array.from(mutation.addedNodes).concat(Array.from(mutation.removedNodes));
    return nodes.some(touchesTabs);
  }

  function firstTabs() {
    return new Promise(resolve => {
      if (currentTabs().length) {
        resolve();
        return;
      }
      const waiter = new MutationObserver(() => {
        if (currentTabs().length) {
          waiter.disconnect();
          resolve();
        }
      });
      waiter.observe(document.documentElement, { childList: true, subtree: true });
    });
  }

  function subscribe() {
    const root = document.body || document.documentElement;
    const observer = new MutationObserver(mutations => {
      if (!mutations.some(isRelevant)) {
        return;
      }
      observer.disconnect();
      try {
        apply();
      } catch (error) {
        console.error("tabgroups: binding failed", error);
      } finally {
        observer.observe(root, OBSERVE_OPTIONS);
      }
    });
    observer.observe(root, OBSERVE_OPTIONS);
  }

  firstTabs().then(() => {
    apply();
    subscribe();
  });
})();
'''

RUNTIME_STYLE = """.tabs-container .tab.tabgroups-decorated {
  border-top-left-radius: 8px;
  border-top-right-radius: 8px;
}
.tabs-container .tab[data-tabgroups-group] {
  box-shadow: inset 0 3px 0 0 var(--tabgroups-color);
}
.tabs-container .tab .tabgroups-chip {
  align-self: center;
  margin-left: 4px;
  padding: 0 6px;
  border-radius: 8px;
  font-size: 10px;
  line-height: 16px;
  white-space: nowrap;
  pointer-events: none;
  color: #f0f0f0;
  background-color: var(--tabgroups-color);
}
"""

__all__ = [
    "RUNTIME_SCRIPT",
    "RUNTIME_STYLE",
    "BINDINGS_PLACEHOLDER",
    "GROUP_ATTRIBUTE",
    "COLOR_PROPERTY",
    "CHIP_CLASS",
    "DECORATED_CLASS",
    "CHIP_TEXT_COLOR",
]
