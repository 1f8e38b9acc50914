"""
plant_list.py — in-memory plant list and the "Add Plant" intake form
"""
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional, Tuple

from care_dates import classify, days_ago, format_timestamp, parse_form_date, parse_timestamp
from plant_store import PlantRecord, StoreError, check_care_field

logger = logging.getLogger(__name__)


@dataclass
class PlantRow:
    plant: PlantRecord
    watered_days: Optional[int]
    watered_tier: str
    repotted_days: int
    fertilized_days: int


class PlantList:
    """
    Holds the plants as last seen in the store.

    Care events are applied locally once the store acknowledges them, without
    a refetch, so a failed write leaves the list exactly as it was.
    """

    def __init__(self, store, sort_by_watered=True, reconcile_after_care=False):
        self.store = store
        self.sort_by_watered = sort_by_watered
        self.reconcile_after_care = reconcile_after_care
        self.plants: Tuple[PlantRecord, ...] = ()
        self.loaded = False

    def load(self, now=None):
        try:
            records = self.store.scan_all()
        except StoreError as e:
            logger.error("Unable to scan plants: %s", e)
            return False
        if self.sort_by_watered:
            # oldest watering first; unparseable dates count as now
            now = now or datetime.now()
            records = sorted(records, key=lambda p: parse_timestamp(p.watered, default=now))
        self.plants = tuple(records)
        self.loaded = True
        logger.info("Loaded %d plants", len(self.plants))
        return True

    def get(self, name):
        for p in self.plants:
            if p.name == name:
                return p
        return None

    def mark_care_event(self, name, field, now=None):
        check_care_field(field)
        today = format_timestamp(now or datetime.now())
        if not self.store.update_field(name, field, today):
            return False
        self.plants = tuple(p.with_field(field, today) if p.name == name else p for p in self.plants)
        if self.reconcile_after_care:
            self.load()
        return True

    def rows(self, now=None, explicit_unknown=False) -> List[PlantRow]:
        now = now or datetime.now()
        out = []
        for p in self.plants:
            days, tier = classify(p.watered, now, explicit_unknown=explicit_unknown)
            out.append(
                PlantRow(
                    plant=p,
                    watered_days=days,
                    watered_tier=tier,
                    repotted_days=days_ago(p.repotted, now),
                    fertilized_days=days_ago(p.fertilized, now),
                )
            )
        return out


@dataclass
class DirectUrl:
    url: str

    def resolve(self, uploader):
        return self.url


@dataclass
class UploadedFile:
    data: bytes
    filename: str
    content_type: Optional[str] = None

    def resolve(self, uploader):
        return uploader.upload(self.data, self.filename, self.content_type)


@dataclass
class PlantDraft:
    name: str = ""
    watered: Optional[datetime] = None
    repotted: Optional[datetime] = None
    fertilized: Optional[datetime] = None
    image: object = None

    def form_value(self, field):
        dt = getattr(self, field)
        return dt.strftime("%Y-%m-%d") if dt else ""

    @property
    def image_url(self):
        return self.image.url if isinstance(self.image, DirectUrl) else ""


class IntakeForm:
    def __init__(self, plant_list, uploader):
        self.plant_list = plant_list
        self.uploader = uploader
        self.is_open = False
        self.draft = PlantDraft()

    def open(self):
        self.is_open = True

    def dismiss(self):
        self.is_open = False
        self.draft = PlantDraft()

    def submit(self):
        draft = self.draft
        name = draft.name.strip()
        if not name:
            logger.error("Refusing to add a plant without a name")
            return False
        try:
            image_url = draft.image.resolve(self.uploader) if draft.image else ""
        except StoreError as e:
            logger.error("Error uploading plant image: %s", e)
            return False
        record = PlantRecord(
            name=name,
            image_url=image_url,
            watered=format_timestamp(draft.watered),
            repotted=format_timestamp(draft.repotted),
            fertilized=format_timestamp(draft.fertilized),
        )
        if not self.plant_list.store.insert(record):
            return False
        self.dismiss()
        self.plant_list.load()
        return True

    @staticmethod
    def draft_from_form(form, files=None):
        """Build a draft from submitted form fields; an uploaded file wins over a URL."""
        image = None
        upload = files.get("image") if files else None
        if upload is not None and upload.filename:
            image = UploadedFile(upload.read(), upload.filename, upload.mimetype or None)
        else:
            url = (form.get("image_url") or "").strip()
            if url:
                image = DirectUrl(url)
        return PlantDraft(
            name=form.get("name") or "",
            watered=parse_form_date(form.get("watered")),
            repotted=parse_form_date(form.get("repotted")),
            fertilized=parse_form_date(form.get("fertilized")),
            image=image,
        )
