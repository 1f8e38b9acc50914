import pytest

from plant_store import ImageUploader, PlantRecord, StoreError, build_uploader, check_care_field


def test_from_item_defaults_missing_attributes():
    record = PlantRecord.from_item({"Name": "Fern", "Watered": "01.01.2024T10:00", "Repotted": 3})
    assert record == PlantRecord(name="Fern", watered="01.01.2024T10:00")


def test_to_item_uses_table_attribute_names():
    record = PlantRecord("Fern", "http://x/fern.jpg", "01.01.2024T10:00", "", "")
    assert record.to_item() == {
        "Name": "Fern",
        "ImageURL": "http://x/fern.jpg",
        "Watered": "01.01.2024T10:00",
        "Repotted": "",
        "Fertilized": "",
    }


def test_with_field_touches_one_field():
    record = PlantRecord("Fern", "u", "w", "r", "f")
    assert record.with_field("repotted", "now") == PlantRecord("Fern", "u", "w", "now", "f")
    with pytest.raises(ValueError):
        record.with_field("name", "Other")


def test_scan_all_maps_items(store, table):
    table.put_item(Item={"Name": "Fern", "Watered": "01.01.2024T10:00"})
    assert store.scan_all() == [PlantRecord(name="Fern", watered="01.01.2024T10:00")]


def test_scan_failure_raises_store_error(store, table):
    table.fail.add("scan")
    with pytest.raises(StoreError):
        store.scan_all()


def test_update_field_sets_one_attribute(store, table):
    assert store.update_field("Fern", "fertilized", "02.02.2024T08:30")
    op, kwargs = table.calls[-1]
    assert op == "update_item"
    assert kwargs == {
        "Key": {"Name": "Fern"},
        "UpdateExpression": "SET Fertilized = :value",
        "ExpressionAttributeValues": {":value": "02.02.2024T08:30"},
    }


def test_update_field_rejects_unknown_field_before_calling_table(store, table):
    with pytest.raises(ValueError):
        store.update_field("Fern", "ImageURL", "x")
    assert table.calls == []


def test_write_failures_return_false(store, table):
    table.fail.update({"update_item", "put_item"})
    assert store.update_field("Fern", "watered", "x") is False
    assert store.insert(PlantRecord("Fern")) is False


def test_insert_overwrites_same_name(store, table):
    assert store.insert(PlantRecord("Fern", watered="01.01.2024T10:00"))
    assert store.insert(PlantRecord("Fern", watered="02.01.2024T10:00"))
    assert store.scan_all() == [PlantRecord("Fern", watered="02.01.2024T10:00")]


def test_upload_keys_by_file_name(uploader, s3):
    url = uploader.upload(b"jpeg", "my fern.jpg", "image/jpeg")
    assert url == "https://plant-pics.s3.eu-central-1.amazonaws.com/plants/my%20fern.jpg"
    stored = s3.objects[("plant-pics", "plants/my fern.jpg")]
    assert stored["Body"] == b"jpeg"
    assert stored["ContentType"] == "image/jpeg"


def test_upload_failure_raises_store_error(uploader, s3):
    s3.fail = True
    with pytest.raises(StoreError):
        uploader.upload(b"jpeg", "fern.jpg")


def test_public_base_url_override(s3):
    uploader = ImageUploader(s3, "plant-pics", base_url="https://cdn.example.com/")
    assert uploader.upload(b"x", "a.png") == "https://cdn.example.com/plants/a.png"


def test_build_uploader_from_config():
    uploader = build_uploader(
        {
            "AWS_REGION": "us-east-1",
            "AWS_ACCESS_KEY_ID": "testing",
            "AWS_SECRET_ACCESS_KEY": "testing",
            "PLANT_IMAGE_BUCKET": "plant-pics",
        }
    )
    assert uploader.bucket == "plant-pics"
    assert uploader.base_url == "https://plant-pics.s3.us-east-1.amazonaws.com"


def test_unknown_care_field_is_named_in_the_error():
    with pytest.raises(ValueError, match="unknown care field: 'pruned'"):
        check_care_field("pruned")
    assert check_care_field("watered") == "Watered"
