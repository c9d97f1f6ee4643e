"""Superhero poster prompt composition.

The composer turns a structured selection (career, location, activity) plus
an optional description of the photographed subject into the instruction
string sent to the image model.  The wording depends on which model variant
will be called:

- **detailed** (text-to-image): a long structured template.  The model never
  sees the photo, so the prompt carries everything: who to draw, costume,
  setting, landmarks, action, and visual constraints.
- **face-match** (reference-image edit): a shorter template that refers to
  the reference subject as ``[1]`` and spells out what to preserve (the face)
  and what to transform (clothing, setting, pose).

Template Structure (detailed)::

    [Subject description]

    TRANSFORMATION TARGET: ...
    COSTUME DESIGN: ...
    SETTING: ...
    ACTION: ...
    VISUAL STYLE: ...

Template Structure (face-match)::

    [Subject description]

    Transform [1] into ...
    PRESERVE: ...
    TRANSFORM: ...

Sections are separated by double newlines.  An empty subject description is
omitted.

Everything here is pure: no I/O, no randomness.  The same inputs always give
the same string.  "Surprise me" in the UI re-enters generation with a
different model variant rather than a different prompt.
"""

from __future__ import annotations

import enum
import json
import logging
from dataclasses import dataclass

from dreambig.core.catalog import get_location

logger = logging.getLogger(__name__)

DEFAULT_CAREER = "superhero"
DEFAULT_LOCATION = "Singapore"
DEFAULT_ACTIVITY = "saving the day"

DETAILED = "detailed"
FACE_MATCH = "face-match"


class AgeBracket(str, enum.Enum):
    """Apparent age of the photographed subject."""

    CHILD = "child"
    TEEN = "teen"
    ADULT = "adult"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, value: object) -> AgeBracket:
        """Coerce a loosely formatted value into a bracket, ``UNKNOWN`` if unrecognised."""
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                pass
        return cls.UNKNOWN


@dataclass(frozen=True)
class PosterSelection:
    """The sanitized wizard selection a poster is built from.

    Attributes:
        career: Career value or free text (e.g. ``"doctor"``).
        location: Location tag (e.g. ``"merlion-park"``) or free text.
        activity: What the hero is doing, user-authored or mission-built.
    """

    career: str = DEFAULT_CAREER
    location: str = DEFAULT_LOCATION
    activity: str = DEFAULT_ACTIVITY

    @classmethod
    def from_values(
        cls,
        career: str | None = None,
        location: str | None = None,
        activity: str | None = None,
    ) -> PosterSelection:
        """Build a selection, substituting defaults for missing or blank values."""
        return cls(
            career=(career or "").strip() or DEFAULT_CAREER,
            location=(location or "").strip() or DEFAULT_LOCATION,
            activity=(activity or "").strip() or DEFAULT_ACTIVITY,
        )


@dataclass(frozen=True)
class SubjectDescription:
    """What the vision sub-call saw in the photo.

    Attributes:
        text: Free-text description of the subject's visible attributes.
        age_bracket: Apparent age used to pick the transformation framing.
        source: ``"vision"`` when produced by the model, ``"fallback"`` otherwise.
    """

    text: str
    age_bracket: AgeBracket = AgeBracket.UNKNOWN
    source: str = "vision"


# ---------------------------------------------------------------------------
# Fixed template sections.
# ---------------------------------------------------------------------------

_VISUAL_STYLE = (
    "VISUAL STYLE:\n"
    "- Ultra-high resolution superhero movie poster aesthetic\n"
    "- Vibrant colors with dramatic cinematic lighting\n"
    "- Professional photography quality, dynamic composition\n"
    "- Kid-friendly, bright and inspiring\n"
    "- NO text, captions, logos, or watermarks anywhere in the image"
)

_FACE_MATCH_STYLE = (
    "Style: vibrant, inspirational superhero poster with bright colors, cinematic "
    "lighting, and professional photography quality. No text or watermarks."
)

# Keyword ladder used when the vision reply is prose instead of JSON.
# Order matters: the first bracket with a matching keyword wins.
_AGE_KEYWORDS: tuple[tuple[AgeBracket, tuple[str, ...]], ...] = (
    (
        AgeBracket.CHILD,
        ("child", "kid", "toddler", "young boy", "young girl", "little boy", "little girl", "preschool"),
    ),
    (AgeBracket.TEEN, ("teen", "adolescent", "teenager", "youth")),
    (
        AgeBracket.ADULT,
        ("adult", "grown", "man ", "woman", "middle-aged", "elderly", "senior", "in their 20s",
         "in their 30s", "in their 40s"),
    ),
)


def classify_age(text: str) -> AgeBracket:
    """Guess the age bracket from free-text description keywords.

    Args:
        text: Description produced by the vision model.

    Returns:
        The first bracket whose keywords occur in *text*, else ``UNKNOWN``.
    """
    lowered = f"{text.lower()} "
    for bracket, keywords in _AGE_KEYWORDS:
        if any(keyword in lowered for keyword in keywords):
            return bracket
    return AgeBracket.UNKNOWN


def transformation_framing(career: str, age_bracket: AgeBracket) -> str:
    """Describe who the subject becomes, tailored to their apparent age."""
    if age_bracket is AgeBracket.CHILD:
        return f"their future grown-up self as a {career} superhero"
    if age_bracket is AgeBracket.TEEN:
        return f"a young-adult {career} hero"
    if age_bracket is AgeBracket.ADULT:
        return f"a superhero version of their current self as a {career}"
    return f"a {career} superhero"


def compose_prompt(
    selection: PosterSelection,
    variant: str,
    subject: SubjectDescription | None = None,
) -> str:
    """Compile the final image-model prompt for *variant*.

    Args:
        selection: Sanitized career, location, and activity.
        variant: ``"detailed"`` or ``"face-match"``.  Anything other than
            ``"face-match"`` uses the detailed template.
        subject: Optional description of the photographed person.

    Returns:
        The composed prompt with sections separated by double newlines.
    """
    if variant == FACE_MATCH:
        return _compose_face_match(selection, subject)
    return _compose_detailed(selection, subject)


def _subject_parts(subject: SubjectDescription | None) -> list[str]:
    if subject is None:
        return []
    text = subject.text.strip()
    return [text] if text else []


def _compose_detailed(selection: PosterSelection, subject: SubjectDescription | None) -> str:
    location = get_location(selection.location)
    career = selection.career
    age_bracket = subject.age_bracket if subject else AgeBracket.UNKNOWN
    framing = transformation_framing(career, age_bracket)

    parts = _subject_parts(subject)
    parts.append(
        "TRANSFORMATION TARGET:\n"
        f"- Show the person as {framing}\n"
        f"- Keep their recognizable characteristics while placing them at {location.label} in Singapore"
    )
    parts.append(
        "COSTUME DESIGN:\n"
        f"- {career}-themed superhero outfit with professional {career} equipment\n"
        "- Bright, colorful, heroic styling with cape and emblem\n"
        "- Kid-friendly and inspiring design"
    )
    parts.append(
        "SETTING:\n"
        f"- {location.label}, {location.description}\n"
        f"- The scene must prominently feature {location.landmark_text}\n"
        f"- {location.label} must be immediately recognizable\n"
        "- Singapore cultural elements and modern cityscape"
    )
    parts.append(
        "ACTION:\n"
        f"- Performing: {selection.activity}\n"
        "- Dynamic superhero action pose with confidence and power"
    )
    parts.append(_VISUAL_STYLE)
    return "\n\n".join(parts)


def _compose_face_match(selection: PosterSelection, subject: SubjectDescription | None) -> str:
    location = get_location(selection.location)
    career = selection.career
    age_bracket = subject.age_bracket if subject else AgeBracket.UNKNOWN
    framing = transformation_framing(career, age_bracket)

    parts = _subject_parts(subject)
    parts.append(
        f"Transform [1] into {framing}, {selection.activity} at {location.label} in Singapore. "
        f"The background must clearly show {location.landmark_text}."
    )
    parts.append(
        "PRESERVE: the face, facial features, skin tone, hair, and identity of [1] exactly "
        "as in the reference image."
    )
    parts.append(
        f"TRANSFORM: only the clothing into a {career} superhero costume, the setting, and the "
        "pose into a heroic action stance."
    )
    parts.append(_FACE_MATCH_STYLE)
    return "\n\n".join(parts)


def compose_poster_brief(selection: PosterSelection) -> str:
    """Compile the short poster brief the wizard sends as ``prompt``.

    This is the single-paragraph description shown to the user before
    generation.  The server composes its own model prompt; the brief is kept
    for diagnostics and the placeholder metadata.
    """
    location = get_location(selection.location)
    career = selection.career
    return (
        f"Create a professional poster showing [1] as a {career} {selection.activity} at "
        f"{location.label} in Singapore. The scene must prominently feature the iconic "
        f"{location.landmark_text} in the background. [1] should wear appropriate {career} "
        "attire and equipment. Style: Vibrant, inspirational superhero poster with bright "
        f"colors and dynamic composition. The Singapore landmark {location.label} must be "
        f"immediately recognizable with clear details of {location.landmark_text}. "
        "Professional photography quality, poster-worthy composition."
    )


def compose_vision_instruction(selection: PosterSelection) -> str:
    """Build the instruction sent with the photo to the vision model.

    The model is asked for JSON so the age bracket comes back as a value
    rather than prose that has to be re-parsed.
    """
    location = get_location(selection.location)
    return (
        "Analyze this person's photo to help transform them into a Singapore superhero.\n\n"
        f"Career: {selection.career} superhero\n"
        f"Location: {location.label}, Singapore\n"
        f"Mission: {selection.activity}\n\n"
        "Describe the visible features that must be preserved (face shape, eye color, hair "
        "texture, skin tone, distinctive features) and a costume and heroic pose that would "
        "suit them. Estimate their age bracket.\n\n"
        "Respond with JSON only, no markdown:\n"
        '{"description": "<two or three sentences>", "age_bracket": "child" | "teen" | "adult"}'
    )


def parse_vision_reply(reply: str) -> SubjectDescription:
    """Turn the vision model reply into a :class:`SubjectDescription`.

    JSON replies provide the age bracket directly.  Prose replies are kept as
    the description and the bracket is guessed with :func:`classify_age`.
    """
    text = reply.strip()
    if text.startswith("```"):
        text = text.strip("`")
        if text.lower().startswith("json"):
            text = text[4:]
        text = text.strip()

    try:
        parsed = json.loads(text)
    except ValueError:
        parsed = None

    if isinstance(parsed, dict) and isinstance(parsed.get("description"), str):
        description = parsed["description"].strip()
        bracket = AgeBracket.parse(parsed.get("age_bracket"))
        if bracket is AgeBracket.UNKNOWN:
            bracket = classify_age(description)
        return SubjectDescription(text=description, age_bracket=bracket)

    logger.debug("Vision reply was not JSON, classifying age from prose")
    return SubjectDescription(text=text, age_bracket=classify_age(text))


def fallback_subject_description(selection: PosterSelection) -> SubjectDescription:
    """Generic description used when the vision sub-call is skipped or fails."""
    return SubjectDescription(
        text=(
            f"Transform this person into a {selection.career} superhero performing "
            f"{selection.activity} in {get_location(selection.location).label}, Singapore. "
            "They wear a colorful costume and strike a heroic pose while preserving their identity."
        ),
        age_bracket=AgeBracket.UNKNOWN,
        source="fallback",
    )
