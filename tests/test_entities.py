from danceup.entities import (
    ClassEntry,
    EventEntry,
    OwnerProfile,
    PackageEntry,
    WorkshopEntry,
    normalize_weekday,
    split_city_state,
)


def test_event_derives_location_from_city_state():
    e = EventEntry.from_document("e1", {"title": "Gala", "date": "2025-08-20", "time": "6:00 PM",
                                        "city": "Austin", "state": "tx"})
    assert e.location == "Austin, TX"
    assert (e.city, e.state) == ("Austin", "TX")


def test_event_splits_legacy_combined_location():
    e = EventEntry.from_document("e1", {"title": "Gala", "location": "Dallas, TX"})
    assert (e.city, e.state) == ("Dallas", "TX")
    assert e.location == "Dallas, TX"


def test_event_keeps_free_text_location():
    e = EventEntry.from_document("e1", {"title": "Gala", "location": "Community Theater"})
    assert e.location == "Community Theater"
    assert (e.city, e.state) == ("", "")


def test_event_type_falls_back_to_other():
    assert EventEntry.from_document("e1", {"type": "showcase"}).event_type == "showcase"
    assert EventEntry.from_document("e1", {"event_type": "party"}).event_type == "other"


def test_class_normalizes_loose_fields():
    c = ClassEntry.from_document("c1", {
        "name": " Ballet ", "day": "tuesday", "level": "expert",
        "max_students": "12", "current_students": "x", "price": "abc",
    })
    assert c.name == "Ballet"
    assert c.day == "Tuesday"
    assert c.level == "all-levels"
    assert c.max_students == 12
    assert c.current_students == 0
    assert c.price is None
    assert c.is_active is True
    assert c.duration == "1 hour"


def test_class_keeps_unknown_day_text():
    assert ClassEntry.from_document("c1", {"day": "Funday"}).day == "Funday"


def test_workshop_reads_optional_image():
    w = WorkshopEntry.from_document("w1", {"title": "Heels", "image_url": "", "price": 25})
    assert w.image_url is None
    assert w.price == 25.0


def test_package_unlimited_label():
    unlimited = PackageEntry.from_document("p1", {"name": "All access", "price": 150,
                                                  "number_of_classes": 999, "validity_days": 30})
    ten = PackageEntry.from_document("p2", {"name": "Ten", "price": 100,
                                            "number_of_classes": 10, "validity_days": 60,
                                            "class_ids": ["a", "", "b"]})
    assert unlimited.is_unlimited and unlimited.classes_label == "Unlimited"
    assert ten.classes_label == "10 classes"
    assert ten.class_ids == ["a", "b"]
    assert ten.to_dict()["is_unlimited"] is False


def test_profile_social_links_default_empty():
    p = OwnerProfile.from_document("u1", {"email": "a@b.co", "state": "ny", "social_media": None})
    assert p.uid == "u1"
    assert p.state == "NY"
    assert p.social_media.instagram == ""
    assert p.access_level == "studio_owner"


def test_weekday_and_city_helpers():
    assert normalize_weekday("SUNDAY") == "Sunday"
    assert normalize_weekday("Sun") is None
    assert split_city_state("Miami , fl") == ("Miami", "FL")
    assert split_city_state("Main Studio") == ("", "")


def test_event_city_state_win_over_stale_location():
    e = EventEntry.from_document("e1", {"title": "Gala", "location": "Austin, TX",
                                        "city": "Dallas", "state": "TX"})
    assert e.location == "Dallas, TX"
