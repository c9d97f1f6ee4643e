"""Static catalogue of locations, careers, and mission-builder options.

These tables back both the prompt composer (location names, descriptions,
and landmark phrases) and the ``GET /api/config`` route that the wizard UI
reads on page load.  They are constants rather than configuration because
they define what the posters look like.

Lookups never fail on unknown values: an unknown location tag resolves to
the generic ``random-place`` entry, and an unknown career value is shown
title-cased so user-added careers still render.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field

logger = logging.getLogger(__name__)

FALLBACK_LOCATION = "random-place"


@dataclass(frozen=True)
class Location:
    """A Singapore location the hero can be placed in.

    Attributes:
        value: Tag sent by the client (e.g. ``"merlion-park"``).
        label: Human-readable name used in prompts and on the poster.
        description: One-line description given to the image model.
        tagline: Short description shown on the location picker.
        emoji: Icon used on the picker and the placeholder poster.
        landmarks: Canonical landmark phrases the image model must render.
        suggested_activities: Activity ideas offered by the wizard.
    """

    value: str
    label: str
    description: str
    tagline: str
    emoji: str
    landmarks: tuple[str, ...]
    suggested_activities: tuple[str, ...] = field(default_factory=tuple)

    @property
    def landmark_text(self) -> str:
        return ", ".join(self.landmarks)

    def to_dict(self) -> dict:
        data = asdict(self)
        data["landmarks"] = list(self.landmarks)
        data["suggested_activities"] = list(self.suggested_activities)
        return data


@dataclass(frozen=True)
class Career:
    value: str
    label: str
    emoji: str
    category: str
    is_custom: bool = False

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class MissionOption:
    id: str
    label: str
    emoji: str

    def to_dict(self) -> dict:
        return asdict(self)


# ---------------------------------------------------------------------------
# Locations.
# ---------------------------------------------------------------------------

LOCATIONS: tuple[Location, ...] = (
    Location(
        value="gardens-by-the-bay",
        label="Gardens by the Bay",
        description="Singapore's futuristic botanical wonderland",
        tagline="Iconic Supertrees and futuristic gardens",
        emoji="🌸",
        landmarks=(
            "Supertree Grove with towering tree-like structures",
            "Cloud Forest dome",
            "Flower Dome conservatory",
        ),
        suggested_activities=(
            "soaring like Superman above the Supertrees",
            "using plant powers to make flowers bloom instantly",
            "creating rainbow bridges between the domes",
            "flying through the Cloud Forest like a nature hero",
            "growing giant protective vines around the gardens",
        ),
    ),
    Location(
        value="marina-bay-sands",
        label="Marina Bay Sands",
        description="Singapore's iconic luxury resort",
        tagline="Famous infinity pool and luxury resort",
        emoji="🏙️",
        landmarks=(
            "three connected towers with infinity pool on top",
            "unique boat-shaped SkyPark",
            "Marina Bay waterfront",
        ),
        suggested_activities=(
            "leaping between the three towers like Spider-Man",
            "creating water tornadoes from the infinity pool",
            "shooting laser beams that light up the city skyline",
            "surfing on energy waves across Marina Bay",
            "building bridges of light connecting the towers",
        ),
    ),
    Location(
        value="jewel-changi",
        label="Jewel Changi Airport",
        description="World-class airport entertainment complex",
        tagline="World's tallest indoor waterfall",
        emoji="💎",
        landmarks=(
            "Rain Vortex indoor waterfall",
            "lush indoor forest",
            "glass dome architecture",
        ),
        suggested_activities=(
            "controlling the Rain Vortex with water powers",
            "flying through the forest dome like a jungle hero",
            "creating portals for instant travel around the world",
            "using crystal powers to make the dome sparkle",
            "guiding planes safely with superhero beacon powers",
        ),
    ),
    Location(
        value="universal-studio",
        label="Universal Studios Singapore",
        description="Theme park on Singapore's resort island",
        tagline="Beach paradise and theme parks",
        emoji="🏖️",
        landmarks=(
            "rotating Universal globe",
            "colourful roller coaster tracks",
            "Sentosa beachfront",
        ),
        suggested_activities=(
            "surfing on giant waves with ocean superpowers",
            "building sandcastles that come to life and protect the beach",
            "racing underwater like Aquaman to save sea creatures",
            "creating fun roller coasters with imagination powers",
            "controlling the sun to create perfect beach weather",
        ),
    ),
    Location(
        value="sentosa-island",
        label="Sentosa Island",
        description="Singapore's premier resort island",
        tagline="Beaches, cable cars and resorts",
        emoji="🏝️",
        landmarks=(
            "pristine beaches",
            "Universal Studios theme park",
            "cable car system",
            "Merlion statue",
        ),
        suggested_activities=(
            "riding the cable car to rescue stranded visitors",
            "guarding the beaches with wave powers",
        ),
    ),
    Location(
        value="botanic-gardens",
        label="Singapore Botanic Gardens",
        description="UNESCO World Heritage botanical garden",
        tagline="UNESCO World Heritage orchid garden",
        emoji="🌿",
        landmarks=(
            "National Orchid Garden",
            "Swan Lake",
            "heritage trees",
            "tropical rainforest",
        ),
        suggested_activities=(
            "talking to ancient trees to learn their wisdom",
            "creating healing potions from magical orchids",
            "flying like a butterfly hero through the garden paths",
            "growing a maze of protective plants around Singapore",
            "using nature powers to clean the air and water",
        ),
    ),
    Location(
        value="singapore-flyer",
        label="Singapore Flyer",
        description="Giant observation wheel with panoramic city views",
        tagline="Giant observation wheel with city views",
        emoji="🎡",
        landmarks=(
            "giant ferris wheel",
            "Marina Bay skyline",
            "Singapore River",
            "cityscape views",
        ),
        suggested_activities=(
            "spinning the wheel super fast to generate clean energy",
            "jumping from capsule to capsule high in the sky",
            "using telescope vision to spot trouble across Singapore",
            "creating wind powers while flying around the wheel",
            "building sky bridges connecting to other tall buildings",
        ),
    ),
    Location(
        value="merlion-park",
        label="Merlion Park",
        description="Home to Singapore's iconic national symbol",
        tagline="Singapore's iconic symbol by the bay",
        emoji="🦁",
        landmarks=(
            "Merlion statue spouting water",
            "Marina Bay backdrop",
            "Singapore skyline",
            "waterfront promenade",
        ),
        suggested_activities=(
            "commanding water like the mighty Merlion",
            "creating protective water shields around Singapore",
            "surfing on the Merlion's water spray across the bay",
            "talking to the lion spirit for ancient wisdom",
            "shooting healing water that helps plants and people",
        ),
    ),
    Location(
        value="national-gallery",
        label="National Gallery Singapore",
        description="Premier visual arts institution",
        tagline="Art, history and culture museums",
        emoji="🏛️",
        landmarks=(
            "neoclassical architecture",
            "Supreme Court and City Hall buildings",
            "cultural district",
        ),
        suggested_activities=(
            "bringing paintings to life with magical art powers",
            "creating 3D sculptures that protect the city",
            "painting portals that transport people to safety",
            "using color powers to brighten everyone's day",
            "making murals that tell stories of Singapore's heroes",
        ),
    ),
    Location(
        value="singapore-zoo",
        label="Singapore Zoo",
        description="Famous open-concept zoo with wildlife habitats",
        tagline="Famous open-concept zoo with wildlife habitats",
        emoji="🦁",
        landmarks=(
            "open-concept rainforest enclosures",
            "orangutans on treetop platforms",
            "Upper Seletar Reservoir shoreline",
        ),
        suggested_activities=(
            "talking to animals and guiding them like allies",
            "summoning protective jungle vines to keep visitors safe",
            "racing alongside cheetahs with super speed",
            "healing injured animals with magical powers",
            "soaring above enclosures to watch over the zoo",
        ),
    ),
    Location(
        value="bird-paradise",
        label="Singapore Bird Paradise",
        description="Bird park with giant walk-through aviaries",
        tagline="Home to colorful birds and giant aviaries",
        emoji="🦜",
        landmarks=(
            "giant walk-through aviaries",
            "flocks of colourful parrots and flamingos",
            "lush tropical wetlands",
        ),
        suggested_activities=(
            "flying with rainbow wings alongside exotic birds",
            "creating shimmering feather shields in the sky",
            "singing with magical bird calls that calm the city",
            "guiding flocks to form protective patterns above Singapore",
            "summoning a giant phoenix made of light",
        ),
    ),
    Location(
        value="art-science-museum",
        label="ArtScience Museum",
        description="Lotus-shaped museum of art and science",
        tagline="Contemporary art and creative exhibitions",
        emoji="🎨",
        landmarks=(
            "lotus-flower shaped museum roof",
            "reflecting lily pond",
            "Helix Bridge and Marina Bay",
        ),
        suggested_activities=(
            "bringing paintings and sculptures to life to defend the city",
            "painting glowing murals that inspire happiness",
            "drawing magical doors that open into safe worlds",
            "splattering colors that turn into shields of light",
            "using brush strokes to reshape the environment creatively",
        ),
    ),
    Location(
        value=FALLBACK_LOCATION,
        label="Singapore",
        description="vibrant multicultural city-state",
        tagline="Surprise me with a magical location!",
        emoji="🏙️",
        landmarks=(
            "modern skyline",
            "tropical architecture",
            "urban gardens",
            "cultural landmarks",
        ),
        suggested_activities=(
            "flying across Singapore's skyline with rainbow trails",
            "creating magic portals between different neighborhoods",
            "using time powers to explore Singapore's history",
            "building invisible bridges connecting all of Singapore",
            "spreading joy and laughter with happiness superpowers",
        ),
    ),
)

_LOCATIONS_BY_VALUE: dict[str, Location] = {loc.value: loc for loc in LOCATIONS}


def get_location(value: str | None) -> Location:
    """Look up a location by tag, falling back to the generic Singapore entry.

    Args:
        value: Location tag from the request (may be empty or unknown).

    Returns:
        The matching :class:`Location`, or the ``random-place`` entry.
    """
    location = _LOCATIONS_BY_VALUE.get(value or "")
    if location is None:
        logger.debug(f"Unknown location tag {value!r}, using generic Singapore entry")
        return _LOCATIONS_BY_VALUE[FALLBACK_LOCATION]
    return location


def location_display_name(value: str) -> str:
    """Return the location label, or a title-cased version of the tag."""
    location = _LOCATIONS_BY_VALUE.get(value)
    if location is not None:
        return location.label
    return value.replace("-", " ").title()


# ---------------------------------------------------------------------------
# Careers.
# ---------------------------------------------------------------------------

HEALTHCARE = "Healthcare"
EDUCATION = "Education"
TECHNOLOGY = "Technology"
SAFETY = "Safety & Security"
TRANSPORT = "Transportation"
CREATIVE = "Creative Arts"
FOOD = "Food & Hospitality"
BUSINESS = "Business & Finance"
SCIENCE = "Science & Research"
SPORTS = "Sports & Fitness"
ENTERTAINMENT = "Entertainment"
SERVICE = "Service Industry"
ENVIRONMENT = "Environment"
LEGAL = "Legal & Government"
ENGINEERING = "Engineering & Construction"

CAREERS: tuple[Career, ...] = (
    Career("doctor", "Doctor", "🧑‍⚕️", HEALTHCARE),
    Career("nurse", "Nurse", "👩‍⚕️", HEALTHCARE),
    Career("paramedic", "Paramedic", "🚑", HEALTHCARE),
    Career("dentist", "Dentist", "🦷", HEALTHCARE),
    Career("veterinarian", "Veterinarian", "🐾", HEALTHCARE),
    Career("pharmacist", "Pharmacist", "💊", HEALTHCARE),
    Career("teacher", "Teacher", "👩‍🏫", EDUCATION),
    Career("professor", "Professor", "👨‍🎓", EDUCATION),
    Career("librarian", "Librarian", "📚", EDUCATION),
    Career("tutor", "Private Tutor", "📝", EDUCATION),
    Career("programmer", "Programmer", "🧑‍💻", TECHNOLOGY),
    Career("software-engineer", "Software Engineer", "👨‍💻", TECHNOLOGY),
    Career("data-scientist", "Data Scientist", "📊", TECHNOLOGY),
    Career("game-developer", "Game Developer", "🎮", TECHNOLOGY),
    Career("ai-engineer", "AI Engineer", "🤖", TECHNOLOGY),
    Career("web-designer", "Web Designer", "💻", TECHNOLOGY),
    Career("firefighter", "Firefighter", "🧑‍🚒", SAFETY),
    Career("police-officer", "Police Officer", "👮‍♀️", SAFETY),
    Career("security-guard", "Security Guard", "🛡️", SAFETY),
    Career("lifeguard", "Lifeguard", "🏊‍♀️", SAFETY),
    Career("pilot", "Pilot", "🧑‍✈️", TRANSPORT),
    Career("bus-driver", "Bus Driver", "🚌", TRANSPORT),
    Career("mrt-captain", "MRT Captain", "🚊", TRANSPORT),
    Career("taxi-driver", "Taxi Driver", "🚕", TRANSPORT),
    Career("ship-captain", "Ship Captain", "🚢", TRANSPORT),
    Career("flight-attendant", "Flight Attendant", "✈️", TRANSPORT),
    Career("artist", "Artist", "🎨", CREATIVE),
    Career("musician", "Musician", "🎵", CREATIVE),
    Career("designer", "Designer", "🖌️", CREATIVE),
    Career("photographer", "Photographer", "📸", CREATIVE),
    Career("animator", "Animator", "🎬", CREATIVE),
    Career("writer", "Writer", "✍️", CREATIVE),
    Career("chef", "Chef", "🍳", FOOD),
    Career("baker", "Baker", "🧁", FOOD),
    Career("food-scientist", "Food Scientist", "🔬", FOOD),
    Career("hotel-manager", "Hotel Manager", "🏨", FOOD),
    Career("scientist", "Scientist", "🧑‍🔬", SCIENCE),
    Career("marine-biologist", "Marine Biologist", "🐠", SCIENCE),
    Career("astronomer", "Astronomer", "🔭", SCIENCE),
    Career("archaeologist", "Archaeologist", "🏺", SCIENCE),
    Career("engineer", "Engineer", "🧑‍🔧", ENGINEERING),
    Career("architect", "Architect", "🏗️", ENGINEERING),
    Career("construction-worker", "Construction Worker", "👷‍♀️", ENGINEERING),
    Career("mechanic", "Mechanic", "🔧", ENGINEERING),
    Career("banker", "Banker", "🏦", BUSINESS),
    Career("accountant", "Accountant", "🧮", BUSINESS),
    Career("entrepreneur", "Business Owner", "💼", BUSINESS),
    Career("salesperson", "Sales Person", "🛍️", BUSINESS),
    Career("athlete", "Professional Athlete", "🏃‍♀️", SPORTS),
    Career("coach", "Sports Coach", "🏆", SPORTS),
    Career("gym-trainer", "Fitness Trainer", "💪", SPORTS),
    Career("actor", "Actor/Actress", "🎭", ENTERTAINMENT),
    Career("singer", "Singer", "🎤", ENTERTAINMENT),
    Career("magician", "Magician", "🎪", ENTERTAINMENT),
    Career("youtuber", "Content Creator", "📹", ENTERTAINMENT),
    Career("cleaner", "Cleaner", "🧹", SERVICE),
    Career("hairdresser", "Hairdresser", "💇‍♀️", SERVICE),
    Career("delivery-person", "Delivery Person", "📦", SERVICE),
    Career("farmer", "Farmer", "🌱", ENVIRONMENT),
    Career("gardener", "Gardener", "🌿", ENVIRONMENT),
    Career("environmental-scientist", "Environmental Scientist", "🌍", ENVIRONMENT),
    Career("lawyer", "Lawyer", "⚖️", LEGAL),
    Career("judge", "Judge", "👨‍⚖️", LEGAL),
    Career("politician", "Government Official", "🏛️", LEGAL),
)

_CAREERS_BY_VALUE: dict[str, Career] = {career.value: career for career in CAREERS}


def career_display_name(value: str) -> str:
    """Return the career label, or the value with its first letter upper-cased.

    Custom careers typed by the user are not in the table, so they are shown
    as entered.
    """
    career = _CAREERS_BY_VALUE.get(value)
    if career is not None:
        return career.label
    return value[:1].upper() + value[1:]


def search_careers(query: str, careers: list[Career] | tuple[Career, ...] | None = None) -> list[Career]:
    """Search careers by label and category.

    Every whitespace-separated term in *query* must appear in the career's
    ``"{label} {category}"`` text (case-insensitive).  Results are ordered with
    label matches on the full query first, then custom careers, then by label.

    Args:
        query: Free-text search string.  Blank returns every career.
        careers: Careers to search, defaults to :data:`CAREERS`.

    Returns:
        Matching careers in display order.
    """
    available = list(CAREERS if careers is None else careers)
    if not query.strip():
        return available

    needle = query.lower()
    terms = needle.split()
    matches = [
        career
        for career in available
        if all(term in f"{career.label} {career.category}".lower() for term in terms)
    ]

    return sorted(
        matches,
        key=lambda career: (
            needle not in career.label.lower(),
            not career.is_custom,
            career.label,
        ),
    )


# ---------------------------------------------------------------------------
# Mission builder.
# ---------------------------------------------------------------------------

ACTION_OPTIONS: tuple[MissionOption, ...] = (
    MissionOption("rescue", "Rescue", "🛟"),
    MissionOption("build", "Build", "🧱"),
    MissionOption("invent", "Invent", "💡"),
    MissionOption("explore", "Explore", "🧭"),
    MissionOption("teach", "Teach", "📘"),
    MissionOption("heal", "Heal", "🫀"),
    MissionOption("protect", "Protect", "🛡️"),
    MissionOption("perform", "Perform", "🎭"),
)

WHO_WHAT_OPTIONS: tuple[MissionOption, ...] = (
    MissionOption("people", "People", "🧑‍🤝‍🧑"),
    MissionOption("animals", "Animals", "🐾"),
    MissionOption("nature", "Nature", "🌳"),
    MissionOption("robots", "Robots", "🤖"),
    MissionOption("space", "Space", "🔭"),
    MissionOption("community", "Community", "🏘️"),
    MissionOption("city", "City", "🏙️"),
)

POWER_OPTIONS: tuple[MissionOption, ...] = (
    MissionOption("super-speed", "Super Speed", "⚡"),
    MissionOption("kindness", "Kindness", "💖"),
    MissionOption("teamwork", "Teamwork", "🤝"),
    MissionOption("gadgets", "Gadgets", "🔧"),
    MissionOption("science", "Science", "🔬"),
    MissionOption("creativity", "Creativity", "🎨"),
)


def _find_option(options: tuple[MissionOption, ...], option_id: str, slot: str) -> MissionOption:
    option = next((o for o in options if o.id == option_id), None)
    if option is None:
        available = ", ".join(o.id for o in options)
        raise KeyError(f"Unknown {slot} option '{option_id}'. Available: {available}")
    return option


def build_mission_sentence(action: str, who: str, power: str) -> str:
    """Assemble the three mission-builder slots into an activity sentence.

    Example:
        >>> build_mission_sentence("rescue", "animals", "kindness")
        'I will Rescue my Animals with Kindness.'

    Raises:
        KeyError: If any slot id is not a known option.
    """
    action_opt = _find_option(ACTION_OPTIONS, action, "action")
    who_opt = _find_option(WHO_WHAT_OPTIONS, who, "who/what")
    power_opt = _find_option(POWER_OPTIONS, power, "power")
    return f"I will {action_opt.label} my {who_opt.label} with {power_opt.label}."
