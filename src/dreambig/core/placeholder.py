"""Locally rendered placeholder poster.

When the upstream generation fails and the failure policy is ``fallback``,
the client still receives a renderable poster: a 512x384 SVG with a gradient
background, the career badge, the location, and the activity, encoded as a
``data:image/svg+xml;base64,...`` URI.  The poster is labelled as a
placeholder so it cannot be mistaken for a generated image.
"""

from __future__ import annotations

import base64
from datetime import datetime
from xml.sax.saxutils import escape

from dreambig.core.catalog import career_display_name, get_location, location_display_name
from dreambig.core.prompt_composer import DEFAULT_LOCATION, PosterSelection

SVG_MIME_TYPE = "image/svg+xml"
HERO_AVATAR = "🦸"
ACTIVITY_PREVIEW_LENGTH = 50

_SVG_TEMPLATE = """<svg width="512" height="384" xmlns="http://www.w3.org/2000/svg">
  <defs>
    <linearGradient id="bg" x1="0%" y1="0%" x2="100%" y2="100%">
      <stop offset="0%" style="stop-color:#667EEA"/>
      <stop offset="50%" style="stop-color:#764BA2"/>
      <stop offset="100%" style="stop-color:#F093FB"/>
    </linearGradient>
    <filter id="glow">
      <feGaussianBlur stdDeviation="4" result="coloredBlur"/>
      <feMerge>
        <feMergeNode in="coloredBlur"/>
        <feMergeNode in="SourceGraphic"/>
      </feMerge>
    </filter>
  </defs>
  <rect width="512" height="384" fill="url(#bg)"/>
  <text x="256" y="30" text-anchor="middle" fill="#FFE4B5" font-size="12" font-weight="bold" font-family="Arial">⚠️ API Error - Showing Placeholder</text>
  <text x="256" y="60" text-anchor="middle" fill="white" font-size="24" font-weight="bold" font-family="Arial" filter="url(#glow)">Singapore Superhero Adventure!</text>
  <text x="256" y="120" text-anchor="middle" font-size="64" opacity="0.3">{location_emoji}</text>
  <text x="256" y="200" text-anchor="middle" font-size="80" filter="url(#glow)">{avatar}</text>
  <rect x="186" y="230" width="140" height="30" rx="15" fill="rgba(255,255,255,0.9)"/>
  <text x="256" y="250" text-anchor="middle" fill="#4F46E5" font-size="14" font-weight="bold" font-family="Arial">{career}</text>
  <text x="256" y="290" text-anchor="middle" fill="white" font-size="16" font-family="Arial">📍 {location}</text>
  <text x="256" y="320" text-anchor="middle" fill="white" font-size="12" font-family="Arial" opacity="0.9">"{activity}"</text>
  <text x="256" y="365" text-anchor="middle" fill="white" font-size="8" font-family="Arial" opacity="0.5">{date}</text>
</svg>
"""


def render_placeholder_svg(selection: PosterSelection, *, generated_at: datetime) -> str:
    """Render the placeholder poster as SVG markup.

    All user-derived text is XML-escaped before interpolation.
    """
    if selection.location == DEFAULT_LOCATION:
        location_label = DEFAULT_LOCATION
    else:
        location_label = location_display_name(selection.location)

    return _SVG_TEMPLATE.format(
        location_emoji=get_location(selection.location).emoji,
        avatar=HERO_AVATAR,
        career=escape(career_display_name(selection.career)),
        location=escape(location_label),
        activity=escape(selection.activity[:ACTIVITY_PREVIEW_LENGTH]),
        date=generated_at.strftime("%d/%m/%Y"),
    )


def render_placeholder(selection: PosterSelection, *, generated_at: datetime) -> str:
    """Render the placeholder poster as a base64 SVG data URI."""
    svg = render_placeholder_svg(selection, generated_at=generated_at)
    encoded = base64.b64encode(svg.encode("utf-8")).decode("ascii")
    return f"data:{SVG_MIME_TYPE};base64,{encoded}"
