"""
Linear multi-step form wizards.

A wizard is an ordered list of steps. Each step validates its own fields;
the user can only move forward past a step whose fields validate, may go
back freely, and may skip steps flagged optional. Steps are numbered from 1.
Nothing is stored between requests; the final submit revalidates every step.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from sportsbnb.core.exceptions import NotFoundError, ValidationError
from sportsbnb.domain.catalog import SKILL_LEVELS, SPORT_TYPES
from sportsbnb.domain.validation import (
    FormErrors,
    PHONE_PATTERN,
    USERNAME_PATTERN,
    blank,
)

StepValidator = Callable[[Mapping[str, Any]], FormErrors]


@dataclass(frozen=True)
class WizardStep:
    key: str
    title: str
    fields: Tuple[str, ...]
    validate: StepValidator
    optional: bool = False

    def describe(self) -> Dict[str, Any]:
        return {
            "key": self.key,
            "title": self.title,
            "fields": list(self.fields),
            "optional": self.optional,
        }


class Wizard:
    def __init__(self, name: str, steps: List[WizardStep]):
        if not steps:
            raise ValueError("A wizard needs at least one step")
        self.name = name
        self.steps = steps

    @property
    def total_steps(self) -> int:
        return len(self.steps)

    def step(self, number: int) -> WizardStep:
        if not 1 <= number <= self.total_steps:
            raise ValueError(f"{self.name} has no step {number}")
        return self.steps[number - 1]

    def start(self, data: Optional[Mapping[str, Any]] = None) -> "WizardState":
        return WizardState(self, 1, dict(data or {}))

    def resume(self, number: int, data: Mapping[str, Any]) -> "WizardState":
        self.step(number)
        return WizardState(self, number, dict(data))

    def validate_all(self, data: Mapping[str, Any]) -> FormErrors:
        errors = FormErrors()
        for step in self.steps:
            for name, message in step.validate(data).items():
                errors.add(name, message)
        return errors

    def describe(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "total_steps": self.total_steps,
            "steps": [step.describe() for step in self.steps],
        }


@dataclass
class WizardState:
    wizard: Wizard
    current: int = 1
    data: Dict[str, Any] = field(default_factory=dict)
    completed: bool = False

    @property
    def step(self) -> WizardStep:
        return self.wizard.step(self.current)

    @property
    def is_last(self) -> bool:
        return self.current == self.wizard.total_steps

    @property
    def progress(self) -> int:
        return round(self.current / self.wizard.total_steps * 100)

    def advance(self, updates: Optional[Mapping[str, Any]] = None) -> FormErrors:
        """
        Merge ``updates`` and move to the next step if the current one
        validates. Returns the current step's errors (empty on success).
        """
        if updates:
            self.data.update(updates)
        errors = self.step.validate(self.data)
        if errors:
            return errors
        if self.is_last:
            self.completed = True
        else:
            self.current += 1
        return errors

    def back(self) -> None:
        if self.current > 1:
            self.current -= 1
        self.completed = False

    def skip(self) -> None:
        if not self.step.optional:
            raise ValidationError({self.step.key: f"{self.step.title} can't be skipped"})
        if self.is_last:
            self.completed = True
        else:
            self.current += 1

    def submit(self) -> Dict[str, Any]:
        """Validate every step and return the collected data"""
        self.wizard.validate_all(self.data).raise_if_any()
        self.completed = True
        return dict(self.data)

    def snapshot(self) -> Dict[str, Any]:
        return {
            "wizard": self.wizard.name,
            "current_step": self.current,
            "total_steps": self.wizard.total_steps,
            "progress": self.progress,
            "completed": self.completed,
            "step": self.step.describe(),
        }


# Step validators

def _sports_field(field_name: str, message: str) -> StepValidator:
    def validate(data: Mapping[str, Any]) -> FormErrors:
        errors = FormErrors()
        sports = data.get(field_name) or []
        if not errors.check(isinstance(sports, list), field_name, "Pick sports from the list"):
            return errors
        if errors.check(len(sports) > 0, field_name, message):
            unknown = [str(s) for s in sports if not isinstance(s, str) or s not in SPORT_TYPES]
            errors.check(not unknown, field_name, f"Unknown sport: {', '.join(unknown)}")
        return errors
    return validate


def _player_basic_info(data: Mapping[str, Any]) -> FormErrors:
    errors = FormErrors()
    username = errors.text(data, "username", "Please enter a username")
    if username is not None:
        errors.check(
            bool(USERNAME_PATTERN.match(username)),
            "username",
            "Usernames are 3-30 letters, digits, dots or underscores"
        )
    errors.optional_text(data, "date_of_birth", 32)
    errors.optional_text(data, "gender", 20)
    return errors


def _player_location(data: Mapping[str, Any]) -> FormErrors:
    errors = FormErrors()
    errors.optional_text(data, "city", 100)
    return errors


def _player_sports(data: Mapping[str, Any]) -> FormErrors:
    errors = _sports_field("preferred_sports", "Pick at least one sport")(data)
    level = data.get("skill_level")
    if level is not None:
        errors.check(isinstance(level, str) and level in SKILL_LEVELS, "skill_level", "Choose a valid skill level")
    return errors


def _avatar(data: Mapping[str, Any]) -> FormErrors:
    errors = FormErrors()
    url = errors.optional_text(data, "avatar_url", 500)
    if url is not None:
        errors.check(url.startswith(("http://", "https://")), "avatar_url", "Upload a profile photo first")
    return errors


def _owner_business(data: Mapping[str, Any]) -> FormErrors:
    errors = FormErrors()
    errors.text(data, "business_name", "Please enter your business name")
    phone = errors.text(data, "phone", "Please enter a contact phone number")
    if phone is not None:
        errors.check(bool(PHONE_PATTERN.match(phone)), "phone", "Enter a valid phone number")
    return errors


def _owner_venue(data: Mapping[str, Any]) -> FormErrors:
    errors = FormErrors()
    errors.text(data, "venue_name", "Please enter your venue's name")
    errors.text(data, "venue_address", "Please enter your venue's address")
    errors.optional_text(data, "venue_description", 2000)
    return errors


def _venue_details(data: Mapping[str, Any]) -> FormErrors:
    errors = FormErrors()
    name = errors.text(data, "name", "Please enter the venue name")
    if name is not None:
        errors.check(len(name) <= 255, "name", "Venue name is too long")
    description = data.get("description")
    if description:
        errors.check(isinstance(description, str), "description", "Enter text for this field")
        errors.check(len(str(description)) <= 2000, "description", "Description is too long")
    return errors


def _venue_location(data: Mapping[str, Any]) -> FormErrors:
    errors = FormErrors()
    errors.text(data, "city", "Please enter the city")
    errors.optional_text(data, "address", 500)
    if (data.get("latitude") is None) != (data.get("longitude") is None):
        errors.add("latitude", "Pick the venue's location on the map")
    lat = errors.number(data, "latitude", "Latitude must be a number")
    lng = errors.number(data, "longitude", "Longitude must be a number")
    if lat is not None:
        errors.check(-90 <= lat <= 90, "latitude", "Latitude must be between -90 and 90")
    if lng is not None:
        errors.check(-180 <= lng <= 180, "longitude", "Longitude must be between -180 and 180")
    return errors


def _venue_pricing(data: Mapping[str, Any]) -> FormErrors:
    errors = _sports_field("sports", "Select at least one sport")(data)
    price = data.get("price_per_hour")
    if errors.check(price is not None and not blank(price), "price_per_hour", "Please set an hourly price"):
        amount = errors.number(data, "price_per_hour", "Price must be a number")
        if amount is not None:
            errors.check(amount > 0, "price_per_hour", "Price must be greater than zero")
    return errors


def _venue_extras(data: Mapping[str, Any]) -> FormErrors:
    errors = FormErrors()
    amenities = data.get("amenities") or []
    errors.check(isinstance(amenities, list), "amenities", "Amenities must be a list")
    url = errors.optional_text(data, "image_url", 500)
    if url is not None:
        errors.check(url.startswith(("http://", "https://")), "image_url", "Upload a venue photo first")
    return errors


PLAYER_ONBOARDING = Wizard("player", [
    WizardStep("basic_info", "Basic info", ("username", "date_of_birth", "gender"), _player_basic_info),
    WizardStep("location", "Location", ("city",), _player_location, optional=True),
    WizardStep("sports", "Sports preferences", ("preferred_sports", "skill_level"), _player_sports, optional=True),
    WizardStep("photo", "Profile photo", ("avatar_url",), _avatar, optional=True),
])

OWNER_ONBOARDING = Wizard("owner", [
    WizardStep("business", "Business details", ("business_name", "phone"), _owner_business),
    WizardStep("venue", "Your venue", ("venue_name", "venue_address", "venue_description"), _owner_venue),
    WizardStep("sports", "Sports offered", ("sports_offered",),
               _sports_field("sports_offered", "Select at least one sport")),
])

VENUE_CREATION = Wizard("venue", [
    WizardStep("details", "Venue details", ("name", "description", "is_indoor"), _venue_details),
    WizardStep("location", "Location", ("address", "city", "zip_code", "latitude", "longitude"), _venue_location),
    WizardStep("pricing", "Pricing and sports", ("price_per_hour", "sports"), _venue_pricing),
    WizardStep("extras", "Amenities and photos", ("amenities", "image_url"), _venue_extras, optional=True),
])

WIZARDS = {w.name: w for w in (PLAYER_ONBOARDING, OWNER_ONBOARDING, VENUE_CREATION)}


def get_wizard(name: str) -> Wizard:
    try:
        return WIZARDS[name]
    except KeyError:
        raise NotFoundError("Wizard", name)


def apply_action(wizard: Wizard, step: int, action: str, data: Mapping[str, Any]) -> Tuple[WizardState, FormErrors]:
    """
    Replay one navigation action against a wizard resumed at ``step``.
    ``action`` is ``next``, ``back`` or ``skip``.
    """
    try:
        state = wizard.resume(step, data)
    except ValueError:
        raise ValidationError({"step": f"Step must be between 1 and {wizard.total_steps}"})

    errors = FormErrors()
    if action == "next":
        errors = state.advance()
    elif action == "back":
        state.back()
    elif action == "skip":
        state.skip()
    else:
        raise ValidationError({"action": "Unknown wizard action"})
    return state, errors
