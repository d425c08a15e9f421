"""Standalone HTML overview of the current groups and ungrouped open files."""

from __future__ import annotations

from html import escape
from typing import Iterable

from tabgroups.groups import GroupStore

from .generator import basename
from .runtime import CHIP_TEXT_COLOR

OVERVIEW_TITLE = "Tab Groups"

_OVERVIEW_STYLE = """body {
  font-family: Arial, sans-serif;
  padding: 10px;
  background-color: #1e1e1e;
  color: #e8e8e8;
}
.group {
  margin: 10px;
  padding: 10px;
  border-radius: 5px;
  border: 2px solid var(--group-color);
}
.group h3 {
  color: %(text)s;
}
.group ul li {
  list-style-type: disc;
}
.file {
  display: inline-block;
  padding: 10px;
  margin: 5px;
  border-radius: 5px;
  background-color: #007acc;
  color: white;
}
""" % {"text": CHIP_TEXT_COLOR}


def render_overview(
    store: GroupStore,
    open_paths: Iterable[str] = (),
    *,
    title: str = OVERVIEW_TITLE,
) -> str:
    """Render the group overview page.

    Args:
        store: Group state to render.
        open_paths: Paths currently open in the host; ungrouped ones are listed separately.
        title: Page heading.

    Returns:
        str: Complete HTML document.
    """
    sections: list[str] = []
    for group in store.groups():
        items = "".join(
            f'<li title="{escape(entry.path)}">{escape(entry.display_name)}</li>'
            for entry in group.files
        )
        sections.append(
            f'<div class="group" style="--group-color: {escape(group.color)}">'
            f"<h3>{escape(group.name)} ({len(group.files)})</h3>"
            f"<ul>{items}</ul></div>"
        )

    ungrouped = store.ungrouped(open_paths)
    open_section = ""
    if ungrouped:
        tiles = "".join(
            f'<div class="file" title="{escape(path)}">{escape(basename(path))}</div>'
            for path in ungrouped
        )
        open_section = f'<div id="open-files"><h2>Open tabs</h2><section>{tiles}</section></div>'

    groups_html = "".join(sections) or "<p>No groups yet.</p>"
    return (
        "<!DOCTYPE html>\n"
        '<html lang="en">\n'
        "<head>\n"
        '<meta charset="UTF-8">\n'
        f"<title>{escape(title)}</title>\n"
        f"<style>\n{_OVERVIEW_STYLE}</style>\n"
        "</head>\n"
        "<body>\n"
        f"<h1>{escape(title)}</h1>\n"
        f'<div id="groups"><h2>Groups</h2>{groups_html}</div>\n'
        f"{open_section}\n"
        "</body>\n"
        "</html>\n"
    )


__all__ = ["render_overview", "OVERVIEW_TITLE"]
