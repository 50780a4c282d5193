# tests/test_content_classifier.py
from app.services.content_classifier import ContentClassifier, has_doubled_quote_defect


def test_valid_object_is_not_repairable():
    a = ContentClassifier().classify('{"name": "Egusi Soup", "description": "Rich melon seed soup"}')
    assert a.is_valid_json
    assert a.has_name_field and a.has_description_field
    assert not a.has_known_quote_defect
    assert not a.is_repairable


def test_doubled_quote_defect_blocks_repair():
    a = ContentClassifier().classify('{"name": "" "Egusi Soup" "", "description": "Tasty"}')
    assert a.has_known_quote_defect
    assert not a.is_valid_json
    assert not a.is_repairable


def test_trailing_comma_is_repairable():
    a = ContentClassifier().classify('{"name": "Moi Moi", "description": "Bean pudding",}')
    assert not a.is_valid_json
    assert a.is_repairable


def test_json_array_is_not_an_object():
    a = ContentClassifier().classify('[{"name": "Akara"}]')
    assert not a.is_valid_json


def test_prose_without_fields():
    a = ContentClassifier().classify("I would suggest a warm bowl of pepper soup.")
    assert not a.has_name_field
    assert not a.is_repairable


def test_defect_markers():
    assert has_doubled_quote_defect('"name": "Egusi Soup" ""')
    assert not has_doubled_quote_defect('"name": "Egusi Soup"')
