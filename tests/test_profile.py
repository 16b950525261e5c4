from interview.profile import ProfileCollector
from models.schemas import CandidateProfile


def test_phone_only_missing():
    profile = CandidateProfile(name="Jane Doe", email="jane@example.com")
    collected = []
    completed = []
    collector = ProfileCollector(
        profile,
        missing_fields=["phone"],
        on_field=lambda field, value: collected.append((field, value)),
        on_complete=completed.append,
    )

    assert collector.current_field == "phone"
    assert "phone number" in collector.opening_prompt()

    assert collector.accept("555-1234") is None
    assert profile.phone == "555-1234"
    assert collector.is_complete
    assert collected == [("phone", "555-1234")]
    assert completed == [profile]


def test_fields_collected_in_fixed_order():
    profile = CandidateProfile()
    collector = ProfileCollector(profile, missing_fields=["phone", "name", "email"])
    assert collector.missing_fields == ["name", "email", "phone"]

    assert collector.accept("Sam Lee") == "Thank you! Now I need your email address:"
    assert collector.accept("sam@example.com") == "Thank you! Now I need your phone number:"
    assert collector.accept("  +15550001111 ") is None
    assert profile.name == "Sam Lee"
    assert profile.email == "sam@example.com"
    assert profile.phone == "+15550001111"


def test_blank_message_reprompts_without_consuming():
    profile = CandidateProfile(name="Jane Doe")
    collector = ProfileCollector(profile)
    assert collector.missing_fields == ["email", "phone"]
    assert collector.accept("   ") == "Please provide your email address:"
    assert collector.current_field == "email"


def test_complete_profile_asks_for_ready():
    profile = CandidateProfile(name="Jane Doe", email="jane@example.com", phone="5551234567")
    completed = []
    collector = ProfileCollector(profile, on_complete=completed.append)
    assert collector.is_complete
    assert "ready" in collector.opening_prompt()
    assert collector.accept("anything") is None
    assert profile.name == "Jane Doe"
    assert completed == []


def test_missing_list_is_fixed_at_creation():
    profile = CandidateProfile(name="Jane Doe")
    collector = ProfileCollector(profile, missing_fields=["phone"])
    collector.accept("5551234567")
    assert collector.is_complete
    assert profile.email is None
