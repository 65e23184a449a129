# =========================
# file: core/catalog.py
# =========================
from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, Literal, Tuple

from core.models import ActivityDef

SectionKey = Literal[
    "prep",
    "first-look",
    "photos",
    "pre-ceremony",
    "ceremony",
    "cocktail",
    "reception-intro",
    "formalities",
    "dinner",
    "end",
]


@dataclass(frozen=True)
class Section:
    key: SectionKey
    title: str
    icon: str
    activities: Tuple[ActivityDef, ...]


@dataclass(frozen=True)
class MealStyle:
    id: str
    name: str
    minutes: int
    description: str


MEAL_STYLES: Dict[str, MealStyle] = {
    m.id: m
    for m in (
        MealStyle("buffet", "Buffet", 60, "Guests serve themselves"),
        MealStyle("plated", "Plated Service", 90, "Served courses"),
        MealStyle("multi-course", "Multiple Courses / Food Truck", 120, "Extended dining experience"),
    )
}
DEFAULT_MEAL_STYLE = "buffet"


def meal_minutes(style: str) -> int:
    meal = MEAL_STYLES.get(style) or MEAL_STYLES[DEFAULT_MEAL_STYLE]
    return meal.minutes


# ---------- Sections ----------
PREP = Section(
    "prep",
    "Getting Ready",
    "💄",
    (
        ActivityDef("hair-makeup-done", "Hair & Makeup Complete", "💄", 0,
                    description="Time all hair & makeup should be finished",
                    is_time_marker=True, is_anchor=True, always_included=True),
        ActivityDef("buffer-break", "Buffer / Lunch Break", "☕", 30,
                    description="Break for lunch and bathroom before getting dressed",
                    always_included=True),
        ActivityDef("bridesmaids-dressed", "Bridesmaids & Groomsmen Get Dressed", "👗", 30,
                    description="Wedding party puts on their attire",
                    tips="Guys and gals happen at same time with 2 photographers",
                    always_included=True),
        ActivityDef("bride-dress", "Bride Gets Dressed", "👰", 30,
                    description="Bride puts on dress - includes dressing photos",
                    always_included=True),
        ActivityDef("groom-getting-ready", "Groom Getting Ready Photos", "🤵", 30,
                    description="Groomsmen photos while bride finishes",
                    can_be_concurrent=True, parallel_with="bridesmaids-dressed"),
        ActivityDef("bride-getting-ready-photos", "Bride Getting Ready Photos", "📸", 30,
                    description="Final bride portraits before ceremony"),
        ActivityDef("details-photos", "Details Photos", "💍", 20,
                    description="Rings, shoes, invitations, dress details",
                    tips="Can be done during hair/makeup or after",
                    can_be_concurrent=True, parallel_with="hair-makeup-done"),
        ActivityDef("robe-photos", "Robe / Casual Photos", "👘", 20,
                    description="Casual getting ready moments with bridesmaids"),
    ),
)

FIRST_LOOK = Section(
    "first-look",
    "First Look & Private Moments",
    "👀",
    (
        ActivityDef("first-look-dad", "First Look with Dad", "👨‍👧", 10,
                    description="Private moment with father",
                    tips="If doing both, this should be BEFORE groom first look",
                    chain="first-look"),
        ActivityDef("first-look-groom", "First Look with Groom", "👀", 15,
                    description="Private reveal between couple", chain="first-look"),
        ActivityDef("private-vows", "Private Vows", "💕", 15,
                    description="Exchange personal vows privately",
                    tips="Can be before ceremony or during cocktail hour", chain="first-look"),
    ),
)

PHOTOS = Section(
    "photos",
    "Photos",
    "📸",
    (
        ActivityDef("couple-portraits", "Couple Portraits", "📸", 30, cocktail_duration=15,
                    description="Romantic photos of just the two of you", chain="photos"),
        ActivityDef("wedding-party-photos", "Wedding Party Photos", "👯", 30, cocktail_duration=20,
                    description="Photos with bridesmaids and groomsmen", chain="photos"),
        ActivityDef("family-formals", "Immediate Family Photos", "👨‍👩‍👧‍👦", 30, cocktail_duration=15,
                    description="Parents, siblings, grandparents",
                    tips="Make a shot list to stay on schedule", chain="photos"),
        ActivityDef("extended-family", "Extended Family Photos", "👪", 20, cocktail_duration=10,
                    description="Aunts, uncles, cousins - during cocktail hour",
                    tips="Only if not doing first look, or for extra family"),
    ),
)

PRE_CEREMONY = Section(
    "pre-ceremony",
    "Before the Ceremony",
    "🙈",
    (
        ActivityDef("hide-bride", "Put Bride Away", "🙈", 30,
                    description="Bride hidden away before guests start arriving"),
        ActivityDef("last-shuttle", "Last Shuttle Arrives", "🚌", 0,
                    description="Final guest shuttle before ceremony", is_time_marker=True),
        ActivityDef("travel-to-church", "Travel to Ceremony Venue", "🚗", 30,
                    description="If ceremony is off-site", conditional="offsite"),
    ),
)

CEREMONY = Section(
    "ceremony",
    "Ceremony",
    "💒",
    (
        ActivityDef("guests-arrive", "Guest Arrival", "🚗", 30,
                    description="Guests arrive and find seats", chain="ceremony"),
        ActivityDef("ceremony-music", "Ceremony Music Begins", "🎵", 15,
                    description="Prelude music as guests are seated", chain="ceremony"),
        ActivityDef("ceremony", "Ceremony", "💒", 25,
                    description="The main event!", chain="ceremony", is_anchor=True),
        ActivityDef("group-photo", "Big Group Photo", "📷", 5,
                    description="Everyone together right after ceremony", chain="post-ceremony"),
        ActivityDef("travel-from-church", "Travel Back from Ceremony", "🚗", 30,
                    description="Return to the venue after an off-site ceremony",
                    conditional="offsite", chain="post-ceremony"),
    ),
)

COCKTAIL = Section(
    "cocktail",
    "Cocktail Hour",
    "🥂",
    (
        ActivityDef("cocktail-hour", "Cocktail Hour", "🥂", 50,
                    description="Drinks and appetizers while photos happen", chain="cocktail"),
        ActivityDef("remaining-photos", "Remaining Photos", "📸", 15,
                    description="Quick additional photos during cocktail hour",
                    tips="Even with first look, some photos may happen here"),
        ActivityDef("couple-break", "Couple Takes A Break", "😮‍💨", 15,
                    description="Couple gets a breather, snack, and moment together"),
        ActivityDef("sunset-photos", "Sunset / Golden Hour Photos", "🌅", 20,
                    description="Sneak away for magic hour shots"),
    ),
)

RECEPTION_INTRO = Section(
    "reception-intro",
    "Reception Begins",
    "🚪",
    (
        ActivityDef("doors-open", "Ballroom/Patio Opens", "🚪", 10,
                    description="Guests move from cocktail to reception space", chain="reception-start"),
        ActivityDef("grand-entrance", "Introductions", "✨", 5,
                    description="Wedding party and couple announced", chain="reception-start"),
        ActivityDef("welcome-toast", "Welcome & Blessing", "🙏", 5,
                    description="Welcome speech and/or blessing over the food", chain="reception-start"),
    ),
)

FORMALITIES = Section(
    "formalities",
    "Formalities",
    "💃",
    (
        ActivityDef("first-dance", "First Dance", "💃", 5,
                    description="Your first dance as a married couple",
                    chain="formalities", can_choose_timing=True),
        ActivityDef("parent-dances", "Parent Dances", "👨‍👩‍👧", 5,
                    description="Father-daughter and mother-son dances",
                    chain="formalities", can_choose_timing=True),
        ActivityDef("toasts", "Toasts & Speeches", "🎤", 15,
                    description="Best man, maid of honor, and family toasts",
                    tips="Limit to 3-5 speeches, 3-5 min each",
                    chain="formalities", can_choose_timing=True),
        ActivityDef("cake-cutting", "Cake Cutting", "🎂", 10,
                    description="Cut the cake together", chain="formalities", can_choose_timing=True),
        ActivityDef("anniversary-dance", "Anniversary Dance", "💑", 5,
                    description="Married couples dance, longest married wins",
                    chain="formalities", can_choose_timing=True),
        ActivityDef("newlywed-game", "Newlywed Game", "🎮", 5,
                    description="Fun game to entertain guests", chain="formalities", can_choose_timing=True),
        ActivityDef("bouquet-toss", "Bouquet Toss", "💐", 5,
                    description="Toss the bouquet", chain="late-formalities", minutes_before_end=60),
        ActivityDef("garter-toss", "Garter Toss", "🎀", 5,
                    description="Traditional garter toss", chain="late-formalities", minutes_before_end=55),
    ),
)

DINNER = Section(
    "dinner",
    "Dinner",
    "🍽️",
    (
        ActivityDef("dinner", "Dinner Service", "🍽️", meal_minutes(DEFAULT_MEAL_STYLE),
                    description="Length follows the meal service style", always_included=True),
    ),
)

END = Section(
    "end",
    "End of Night",
    "🎇",
    (
        ActivityDef("open-dancing", "Open Dancing Begins", "🪩", 0,
                    description="Dance floor is open until last dance!", is_time_marker=True),
        ActivityDef("grand-exit", "Sparkler / Grand Exit", "🎇", 10,
                    description="Sparklers, bubbles, or confetti send-off",
                    tips="Can happen mid-reception (couple returns to party!) or at the very end",
                    flexible=True, minutes_before_end=15),
        ActivityDef("last-dance", "Last Dance", "💕", 5,
                    description="Final dance with all guests", minutes_before_end=10),
        ActivityDef("private-last-dance", "Private Last Dance", "💑", 5,
                    description="Just the two of you after guests leave",
                    tips="Happens after the last dance, very end of the night", minutes_before_end=5),
    ),
)

SECTIONS: Tuple[Section, ...] = (
    PREP,
    FIRST_LOOK,
    PHOTOS,
    PRE_CEREMONY,
    CEREMONY,
    COCKTAIL,
    RECEPTION_INTRO,
    FORMALITIES,
    DINNER,
    END,
)

ALL_ACTIVITIES: Tuple[ActivityDef, ...] = tuple(a for s in SECTIONS for a in s.activities)
ACTIVITIES: Dict[str, ActivityDef] = {a.id: a for a in ALL_ACTIVITIES}


# ---------- Chains (explicit order) ----------
CHAINS: Dict[str, Tuple[str, ...]] = {
    # after the buffer break, in this order
    "prep": (
        "robe-photos",
        "bridesmaids-dressed",
        "groom-getting-ready",
        "bride-dress",
        "bride-getting-ready-photos",
        "details-photos",
    ),
    "first-look": ("first-look-dad", "first-look-groom", "private-vows"),
    # first look path: portraits before the ceremony, sweethearts first
    "portraits-before": ("couple-portraits", "wedding-party-photos", "family-formals"),
    # no first look: during cocktail hour, sweethearts last
    "portraits-cocktail": ("family-formals", "wedding-party-photos", "couple-portraits", "extended-family"),
    "cocktail-extras": ("remaining-photos", "extended-family"),
    "post-ceremony": ("group-photo", "travel-from-church"),
    "reception-start": ("doors-open", "grand-entrance", "welcome-toast"),
    "formalities": (
        "first-dance",
        "parent-dances",
        "toasts",
        "cake-cutting",
        "anniversary-dance",
        "newlywed-game",
    ),
    "from-end": ("bouquet-toss", "garter-toss", "grand-exit", "last-dance", "private-last-dance"),
}


def get_activity(activity_id: str) -> ActivityDef:
    try:
        return ACTIVITIES[activity_id]
    except KeyError:
        raise KeyError(f"Unknown activity: {activity_id}") from None


def condition_met(activity: ActivityDef, offsite_ceremony: bool) -> bool:
    if activity.conditional == "offsite":
        return offsite_ceremony
    return True
