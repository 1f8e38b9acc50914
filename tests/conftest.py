import pytest
from botocore.exceptions import ClientError

import plantera
from plant_list import IntakeForm, PlantList
from plant_store import ImageUploader, PlantStore


def client_error(op):
    return ClientError({"Error": {"Code": "ServiceUnavailable", "Message": "down"}}, op)


class FakeTable:
    """Stands in for a boto3 DynamoDB Table keyed by Name."""

    def __init__(self, items=None):
        self.items = {i["Name"]: dict(i) for i in (items or [])}
        self.order = [i["Name"] for i in (items or [])]
        self.fail = set()
        self.calls = []

    def scan(self, **kwargs):
        self.calls.append(("scan", kwargs))
        if "scan" in self.fail:
            raise client_error("Scan")
        return {"Items": [dict(self.items[n]) for n in self.order], "Count": len(self.order)}

    def update_item(self, **kwargs):
        self.calls.append(("update_item", kwargs))
        if "update_item" in self.fail:
            raise client_error("UpdateItem")
        name = kwargs["Key"]["Name"]
        attr = kwargs["UpdateExpression"].split()[1]
        if name not in self.items:
            self.items[name] = {"Name": name}
            self.order.append(name)
        self.items[name][attr] = kwargs["ExpressionAttributeValues"][":value"]

    def put_item(self, **kwargs):
        self.calls.append(("put_item", kwargs))
        if "put_item" in self.fail:
            raise client_error("PutItem")
        item = kwargs["Item"]
        if item["Name"] not in self.items:
            self.order.append(item["Name"])
        self.items[item["Name"]] = dict(item)


class FakeS3:
    def __init__(self):
        self.objects = {}
        self.fail = False

    def put_object(self, **kwargs):
        if self.fail:
            raise client_error("PutObject")
        self.objects[(kwargs["Bucket"], kwargs["Key"])] = kwargs


@pytest.fixture
def table():
    return FakeTable()


@pytest.fixture
def s3():
    return FakeS3()


@pytest.fixture
def store(table):
    return PlantStore(table)


@pytest.fixture
def uploader(s3):
    return ImageUploader(s3, "plant-pics", region="eu-central-1")


@pytest.fixture
def plant_list(store):
    return PlantList(store)


@pytest.fixture
def intake(plant_list, uploader):
    return IntakeForm(plant_list, uploader)


@pytest.fixture
def client(plant_list, intake):
    plantera.app.config["TESTING"] = True
    plantera.app.extensions["plantera"] = {"plant_list": plant_list, "intake_form": intake}
    with plantera.app.test_client() as c:
        yield c
    plantera.app.extensions.pop("plantera", None)
