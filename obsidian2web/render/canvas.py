"""Rendering of JSON canvas documents (nodes and edges on a 2D board)."""

import json
import os
from typing import TYPE_CHECKING, List, Optional, TextIO

import mistune
from pydantic import BaseModel, ValidationError

from obsidian2web.core.models import MalformedInputError
from obsidian2web.render.html import unsafe_html

if TYPE_CHECKING:
    from obsidian2web.core.context import BuildContext


class CanvasNode(BaseModel):
    id: str
    x: int
    y: int
    width: int
    height: int
    type: str
    text: str = ""
    color: str = "0"
    file: Optional[str] = None
    url: Optional[str] = None
    label: Optional[str] = None


class CanvasEdge(BaseModel):
    id: str
    fromNode: str
    # the canvas format leaves side defaults open
    fromSide: str = "bottom"
    fromEnd: Optional[str] = "none"
    toNode: str
    toSide: str = "top"
    toEnd: Optional[str] = "arrow"
    label: Optional[str] = None

    def to_script(self) -> dict:
        return {
            'id': self.id,
            'fromNode': self.fromNode,
            'fromSide': self.fromSide,
            'fromEnd': self.fromEnd or "none",
            'toNode': self.toNode,
            'toSide': self.toSide,
            'toEnd': self.toEnd or "none",
            'label': self.label,
        }


class CanvasData(BaseModel):
    nodes: List[CanvasNode]
    edges: List[CanvasEdge]


def parse_canvas(text: str) -> CanvasData:
    """Parse and validate a canvas document.

    Raises:
        MalformedInputError: if the text is not JSON or misses required fields
    """
    try:
        return CanvasData.model_validate_json(text)
    except ValidationError as e:
        raise MalformedInputError(f"Invalid canvas document: {e}") from e


CANVAS_HEADER = """\
  <div id="container">
    <div id="canvas-container">
      <svg id="canvas-edges">
        <defs>
          <marker id="arrowhead" markerWidth="10" markerHeight="8"
          refX="5" refY="4" orient="auto">
            <polygon points="0 0, 10 4, 0 8"/>
          </marker>
        </defs>
        <g id="edge-paths">
        </g>
      </svg>
      <div id="canvas-nodes">
"""

CANVAS_CONTROLS = """\
      </div>
      <div id="output" class="theme-dark hidden">
        <div class="code-header">
          <span class="language">JSON&nbsp;Canvas</span>
          <span class="close-output">&times;</span>
        </div>
        <div id="output-code">
          <pre><code class="language-json" id="positionsOutput"></code></pre>
        </div>
        <div class="code-footer">
          <button class="button-copy">Copy code</button>
          <button class="button-download">Download file</button>
        </div>
      </div>
      <div id="controls">
        <div id="zoom-controls">
          <button id="toggle-output">Toggle output</button>
          <button id="zoom-out">Zoom out</button>
          <button id="zoom-in">Zoom in</button>
          <button id="zoom-reset">Reset</button>
        </div>
      </div>
    </div>
  </div>
"""


def _node_color(node: CanvasNode):
    """Return (css class, inline style) for a node color."""
    if node.color.startswith('#'):
        color = unsafe_html(node.color)
        return "", f"--color-ui-1: {color}; --color-bg-1: color-mix(in srgb, {color} 20%, black)"
    return f"o2w-canvas-color-{unsafe_html(node.color)}", ""


def _node_content(ctx: "BuildContext", node: CanvasNode, markdown: mistune.Markdown) -> str:
    parts = []
    if node.text:
        parts.append(markdown(node.text))
    if node.file:
        page = ctx.page_from_path(ctx.vault_path / node.file)
        if page is not None:
            href = unsafe_html(ctx.web_path(f"/{page.web_path}"))
            parts.append(f'<a href="{href}">{unsafe_html(page.title)}</a>')
        else:
            parts.append(f'<p>{unsafe_html(os.path.basename(node.file))}</p>')
    if node.url:
        url = unsafe_html(node.url)
        parts.append(f'<a href="{url}">{url}</a>')
    return ''.join(parts)


def write_canvas(out: TextIO, ctx: "BuildContext", text: str, markdown: mistune.Markdown) -> None:
    """Render a canvas document: positioned nodes plus the edge list script."""
    canvas = parse_canvas(text)

    out.write(CANVAS_HEADER)

    for node in canvas.nodes:
        color_class, color_style = _node_color(node)
        out.write(
            f' <node id="{unsafe_html(node.id)}" class="node node-text {color_class}" '
            f'data-node-type="{unsafe_html(node.type)}" '
            f'style="left: {node.x}px; top: {node.y}px; width: {node.width}px; '
            f'height: {node.height}px; {color_style}">\n'
            f'   <div class="node-name">{unsafe_html(node.label or "")}</div>\n'
            '   <div class="node-text-content">\n'
        )
        out.write(_node_content(ctx, node, markdown))
        out.write('   </div>\n </node>\n')

    out.write(CANVAS_CONTROLS)

    edges = json.dumps([edge.to_script() for edge in canvas.edges], indent=2)
    out.write(' <script>\n let edges = ')
    out.write(edges.replace('</', '<\\/'))
    out.write(';\n </script>\n')

    webroot = ctx.config.webroot
    out.write(
        f'    <script src="{webroot}/canvas.js"></script>\n'
    )
