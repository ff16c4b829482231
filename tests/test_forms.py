"""
Unit tests for form gating and multi-step wizards
"""

import pytest

from sportsbnb.core.exceptions import ValidationError
from sportsbnb.domain.validation import FormErrors, validate_password_change, validate_signup
from sportsbnb.domain.wizard import (
    OWNER_ONBOARDING,
    PLAYER_ONBOARDING,
    VENUE_CREATION,
    apply_action,
    get_wizard,
)
from sportsbnb.core.exceptions import NotFoundError

VALID_SIGNUP = {
    "email": "player@sportsbnb.am",
    "password": "goal-keeper-9",
    "confirm_password": "goal-keeper-9",
    "full_name": "Ani Petrosyan",
    "user_type": "player",
}


@pytest.mark.unit
class TestSignupGating:
    """Signup is rejected field by field before anything is stored"""

    def test_valid_signup(self):
        assert validate_signup(VALID_SIGNUP) == {}

    def test_short_password(self):
        errors = validate_signup({**VALID_SIGNUP, "password": "short", "confirm_password": "short"})
        assert errors == {"password": "Password must be at least 8 characters"}

    def test_password_mismatch(self):
        errors = validate_signup({**VALID_SIGNUP, "confirm_password": "something-else"})
        assert errors == {"confirm_password": "Passwords do not match"}

    def test_missing_fields_reported_together(self):
        errors = validate_signup({"user_type": "player"})
        assert set(errors) == {"full_name", "email", "password"}

    def test_invalid_email(self):
        errors = validate_signup({**VALID_SIGNUP, "email": "not-an-email"})
        assert errors["email"] == "Enter a valid email address"

    def test_unknown_user_type(self):
        errors = validate_signup({**VALID_SIGNUP, "user_type": "coach"})
        assert "user_type" in errors

    def test_raise_if_any(self):
        errors = validate_signup({**VALID_SIGNUP, "full_name": "  "})
        with pytest.raises(ValidationError) as exc_info:
            errors.raise_if_any()
        assert exc_info.value.errors == {"full_name": "Please enter your name"}
        assert exc_info.value.status_code == 422

    def test_first_error_per_field_wins(self):
        errors = FormErrors()
        errors.add("email", "first")
        errors.add("email", "second")
        assert errors["email"] == "first"

    def test_password_change(self):
        errors = validate_password_change({
            "current_password": "",
            "new_password": "long-enough-1",
            "confirm_password": "long-enough-2",
        })
        assert set(errors) == {"current_password", "confirm_password"}


@pytest.mark.unit
class TestWizards:
    """Linear wizard navigation"""

    def test_cannot_advance_past_invalid_step(self):
        state = PLAYER_ONBOARDING.start()
        errors = state.advance({"username": ""})
        assert errors == {"username": "Please enter a username"}
        assert state.current == 1

    def test_advance_merges_data(self):
        state = PLAYER_ONBOARDING.start()
        assert state.advance({"username": "ani_p"}) == {}
        assert state.current == 2
        assert state.data["username"] == "ani_p"
        assert state.progress == 50

    def test_back_and_skip(self):
        state = PLAYER_ONBOARDING.resume(2, {"username": "ani_p"})
        state.skip()
        assert state.current == 3
        state.back()
        assert state.current == 2

    def test_back_from_first_step_stays(self):
        state = PLAYER_ONBOARDING.start()
        state.back()
        assert state.current == 1

    def test_required_step_cannot_be_skipped(self):
        state = PLAYER_ONBOARDING.start()
        with pytest.raises(ValidationError):
            state.skip()

    def test_last_step_completes(self):
        state = OWNER_ONBOARDING.resume(3, {"sports_offered": ["Football"]})
        assert state.advance() == {}
        assert state.completed is True
        assert state.current == 3

    def test_unknown_sport_rejected(self):
        state = OWNER_ONBOARDING.resume(3, {"sports_offered": ["Quidditch"]})
        errors = state.advance()
        assert "Quidditch" in errors["sports_offered"]
        assert state.completed is False

    def test_submit_revalidates_every_step(self):
        state = VENUE_CREATION.resume(4, {"name": "Arena"})
        with pytest.raises(ValidationError) as exc_info:
            state.submit()
        assert {"city", "sports", "price_per_hour"} <= set(exc_info.value.errors)

    def test_venue_price_must_be_positive(self):
        errors = VENUE_CREATION.validate_all({
            "name": "Arena", "city": "Yerevan", "sports": ["Tennis"], "price_per_hour": 0,
        })
        assert errors == {"price_per_hour": "Price must be greater than zero"}

    def test_venue_location_needs_both_coordinates(self):
        errors = VENUE_CREATION.validate_all({
            "name": "Arena", "city": "Yerevan", "sports": ["Tennis"], "price_per_hour": 30,
            "latitude": 40.1,
        })
        assert "latitude" in errors

    def test_describe(self):
        description = VENUE_CREATION.describe()
        assert description["name"] == "venue"
        assert description["total_steps"] == 4
        assert description["steps"][3]["optional"] is True

    def test_apply_action_next(self):
        state, errors = apply_action(PLAYER_ONBOARDING, 1, "next", {"username": "ani_p"})
        assert errors == {}
        assert state.snapshot()["current_step"] == 2

    def test_apply_action_rejects_bad_step(self):
        with pytest.raises(ValidationError) as exc_info:
            apply_action(PLAYER_ONBOARDING, 9, "next", {})
        assert "step" in exc_info.value.errors

    def test_apply_action_rejects_unknown_action(self):
        with pytest.raises(ValidationError):
            apply_action(PLAYER_ONBOARDING, 1, "jump", {})

    def test_get_wizard(self):
        assert get_wizard("owner") is OWNER_ONBOARDING
        with pytest.raises(NotFoundError):
            get_wizard("coach")


@pytest.mark.unit
class TestWizardInputTypes:
    """Wrongly typed JSON values become field errors"""

    def test_non_text_username(self):
        state = PLAYER_ONBOARDING.resume(1, {"username": 12345})
        assert state.advance() == {"username": "Enter text for this field"}
        assert state.current == 1

    def test_non_list_sports(self):
        errors = PLAYER_ONBOARDING.validate_all({"username": "ani_p", "preferred_sports": 5})
        assert errors == {"preferred_sports": "Pick sports from the list"}

    def test_non_text_sport_entries(self):
        errors = OWNER_ONBOARDING.validate_all({
            "business_name": "Ani Sports", "phone": "+374 91 000000",
            "venue_name": "Ani Arena", "venue_address": "5 Tumanyan St",
            "sports_offered": ["Football", 7, {"name": "Tennis"}],
        })
        assert errors["sports_offered"].startswith("Unknown sport: 7")

    def test_non_numeric_coordinates(self):
        errors = VENUE_CREATION.step(2).validate({"city": "Yerevan", "latitude": "north", "longitude": [44]})
        assert errors == {
            "latitude": "Latitude must be a number",
            "longitude": "Longitude must be a number",
        }

    def test_numeric_strings_are_accepted(self):
        errors = VENUE_CREATION.step(2).validate({"city": "Yerevan", "latitude": "40.18", "longitude": "44.51"})
        assert errors == {}

    def test_non_text_phone_and_skill_level(self):
        assert OWNER_ONBOARDING.step(1).validate({"business_name": "Ani", "phone": 37491000000}) == {
            "phone": "Enter text for this field"
        }
        errors = PLAYER_ONBOARDING.step(3).validate({"preferred_sports": ["Tennis"], "skill_level": ["pro"]})
        assert errors == {"skill_level": "Choose a valid skill level"}

    def test_bad_price_type(self):
        errors = VENUE_CREATION.step(3).validate({"sports": ["Tennis"], "price_per_hour": {"amount": 30}})
        assert errors == {"price_per_hour": "Price must be a number"}

    def test_text_helpers(self):
        errors = FormErrors()
        assert errors.text({"name": "  Arena "}, "name") == "Arena"
        assert errors.optional_text({"bio": ""}, "bio") is None
        assert errors.number({"lat": True}, "lat") is None
        assert errors == {"lat": "Enter a number"}
