"""
Documentation Renderer.

Produces the Swagger UI page for a request. The static OpenAPI template is
shared by every request; rendering deep-copies it and patches only the
`servers` list, so concurrent requests with different origins never see
each other's values.

Origin precedence:
    1. Explicit override (HOST_URL)
    2. x-forwarded-proto (first value) + Host header
    3. Transport scheme + Host header
"""
from __future__ import annotations

import copy
import html
import json
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Literal

SWAGGER_UI_VERSION = "4.18.3"
SWAGGER_UI_CDN = f"https://cdnjs.cloudflare.com/ajax/libs/swagger-ui/{SWAGGER_UI_VERSION}"

_HTML_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8">
  <title>{title}</title>
  <link rel="stylesheet" type="text/css" href="{cdn}/swagger-ui.css" />
  <link rel="icon" type="image/png" href="{cdn}/favicon-32x32.png" sizes="32x32" />
  <link rel="icon" type="image/png" href="{cdn}/favicon-16x16.png" sizes="16x16" />
  <style>
    html {{ box-sizing: border-box; overflow: -moz-scrollbars-vertical; overflow-y: scroll; }}
    *, *:before, *:after {{ box-sizing: inherit; }}
    body {{ margin:0; background: #fafafa; }}
  </style>
</head>
<body>
  <div id="swagger-ui"></div>
  <script src="{cdn}/swagger-ui-bundle.js"></script>
  <script src="{cdn}/swagger-ui-standalone-preset.js"></script>
  <script>
    window.onload = function() {{
      const ui = SwaggerUIBundle({{
        spec: {spec},
        dom_id: '#swagger-ui',
        deepLinking: true,
        presets: [
          SwaggerUIBundle.presets.apis,
          SwaggerUIStandalonePreset
        ],
        plugins: [
          SwaggerUIBundle.plugins.DownloadUrl
        ],
        layout: "StandalonePreset"
      }});
      window.ui = ui;
    }};
  </script>
</body>
</html>"""


@dataclass(frozen=True)
class OriginContext:
    """
    Scheme + host the API is being accessed under.

    Attributes:
        url: Origin without trailing slash, e.g. "https://api.example.com"
        source: "override" when configured, "request" when derived
    """

    url: str
    source: Literal["override", "request"] = "request"


@dataclass(frozen=True)
class RenderedDocument:
    """Rendered specification and the HTML page embedding it."""

    specification: dict[str, Any]
    html: str


def resolve_origin(
    *,
    host: str,
    scheme: str,
    forwarded_proto: str | None = None,
    override: str | None = None,
) -> OriginContext:
    """
    Resolve the origin for a request.

    Args:
        host: Host header (host[:port])
        scheme: Transport-level scheme ("http" / "https")
        forwarded_proto: x-forwarded-proto header, if any
        override: Configured origin, wins over everything else
    """
    if override:
        return OriginContext(url=override.rstrip("/"), source="override")

    protocol = scheme
    if forwarded_proto:
        # Proxy chains send a comma-separated list, client-facing hop first
        protocol = forwarded_proto.split(",")[0].strip() or scheme
    return OriginContext(url=f"{protocol}://{host}", source="request")


def _embed_json(value: Any) -> str:
    # Keep "</script>" inside string values from closing the script tag
    return json.dumps(value).replace("</", "<\\/")


def render_documentation(template: Mapping[str, Any], origin: OriginContext) -> RenderedDocument:
    """
    Render the documentation for one origin.

    The template is never modified.
    """
    specification = copy.deepcopy(dict(template))
    specification["servers"] = [{"url": origin.url}]

    title = specification.get("info", {}).get("title", "API Docs")
    page = _HTML_TEMPLATE.format(
        title=html.escape(title),
        cdn=SWAGGER_UI_CDN,
        spec=_embed_json(specification),
    )
    return RenderedDocument(specification=specification, html=page)

