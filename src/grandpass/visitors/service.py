from __future__ import annotations

import io
import random
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Optional

import qrcode

from ..common.datetime_utils import manila_month_bounds, manila_today
from ..common.validators import require_all
from ..core.constants import VISITOR_ID_RANDOM_DIGITS
from ..core.exceptions import ApiError, HttpStatusError, ValidationError
from ..core.logger import get_logger
from ..directory.model import Professor
from ..directory.repository import OfficeRepository, ProfessorRepository
from ..visits.repository import OfficeVisitRepository, VisitorLogRepository
from ..visits.service import degrade
from .model import PassLine, RegistrationForm, VisitorPass
from .repository import VisitorRepository

logger = get_logger(__name__)


def generate_visitor_id(now: Optional[datetime] = None, *, rng: Optional[random.Random] = None) -> str:
    """``YYYYMMDD`` (Manila) followed by 8 random digits."""
    rng = rng or random.SystemRandom()
    low = 10 ** (VISITOR_ID_RANDOM_DIGITS - 1)
    high = 10 ** VISITOR_ID_RANDOM_DIGITS - 1
    return manila_today(now).strftime("%Y%m%d") + str(rng.randint(low, high))


def qr_png(data: str) -> bytes:
    qr = qrcode.QRCode(
        version=1,
        error_correction=qrcode.constants.ERROR_CORRECT_L,
        box_size=10,
        border=2,
    )
    qr.add_data(data)
    qr.make(fit=True)
    img = qr.make_image(fill_color="black", back_color="white")

    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


class RegistrationService:
    def __init__(
        self,
        visitors: VisitorRepository,
        logs: VisitorLogRepository,
        offices: OfficeRepository,
        professors: ProfessorRepository,
    ):
        self._visitors = visitors
        self._logs = logs
        self._offices = offices
        self._professors = professors

    def offices(self):
        return self._offices.list_all()

    def professors_for_offices(self, office_ids: Iterable[str]) -> dict[str, list[Professor]]:
        """Professors of each selected office; a failed office maps to []."""
        ids = list(dict.fromkeys(str(o) for o in office_ids if str(o).strip()))
        if not ids:
            return {}

        def load(office_id: str) -> list[Professor]:
            try:
                return list(self._professors.list_by_department(office_id))
            except ApiError as e:
                logger.warning("Could not load professors for office %s: %s", office_id, e)
                return []

        with ThreadPoolExecutor(max_workers=min(8, len(ids))) as pool:
            futures = {office_id: pool.submit(load, office_id) for office_id in ids}
            return {office_id: f.result() for office_id, f in futures.items()}

    def register(self, form: RegistrationForm, *, now: Optional[datetime] = None) -> str:
        """Create the visitor record and its first entry log; returns the visitor id."""
        require_all(
            {
                "first_name": form.first_name,
                "last_name": form.last_name,
                "gender": form.gender,
                "birth_date": form.birth_date,
            },
            message="Please fill in your name, gender and birth date.",
        )
        if not form.office_ids:
            raise ValidationError("Please select at least one office to visit.")

        visitors_id = generate_visitor_id(now)
        payload = {
            "visitorsID": visitors_id,
            "first_name": form.first_name.strip(),
            "middle_name": (form.middle_name or "").strip(),
            "last_name": form.last_name.strip(),
            "email": (form.email or "").strip(),
            "phone": (form.phone or "").strip(),
            "suffix": "",
            "gender": form.gender,
            "birth_date": form.birth_date,
            "purpose_of_visit": (form.purpose or "").strip(),
            "faculty_to_visit": [
                {"office": form.office_name(office_id), "professor": form.professor_name(office_id)}
                for office_id in form.office_ids
            ],
        }

        try:
            self._visitors.create(payload)
        except HttpStatusError as e:
            logger.warning("Registration rejected: %s", e)
            raise ValidationError(f"Failed to register: {e}")

        try:
            self._logs.create(visitors_id)
        except ApiError as e:
            # The visitor exists; the gate scan records the entry later.
            logger.warning("Entry log for new visitor %s failed: %s", visitors_id, e)

        logger.info("Registered visitor %s", visitors_id)
        return visitors_id


class VisitorPassService:
    def __init__(
        self,
        visitors: VisitorRepository,
        visits: OfficeVisitRepository,
        offices: OfficeRepository,
        professors: ProfessorRepository,
    ):
        self._visitors = visitors
        self._visits = visits
        self._offices = offices
        self._professors = professors

    def _lines(self, visitors_id: str) -> Optional[list[PassLine]]:
        with ThreadPoolExecutor(max_workers=3) as pool:
            rows_f = pool.submit(self._visits.list_for_visitor, visitors_id)
            offices_f = pool.submit(degrade, self._offices.list_all, "offices")
            profs_f = pool.submit(degrade, self._professors.list_all, "professors")
            offices, profs = offices_f.result(), profs_f.result()
            try:
                rows = rows_f.result()
            except ApiError as e:
                logger.warning("Could not load visits for pass %s: %s", visitors_id, e)
                return None

        office_by_id = {str(o.id): o for o in offices}
        prof_by_id = {str(p.id): p for p in profs}
        lines = []
        for row in rows:
            office = office_by_id.get(str(row.dept_id))
            prof = prof_by_id.get(str(row.prof_id))
            lines.append(
                PassLine(
                    office=(office.name if office and office.name else str(row.dept_id)),
                    professor=(prof.name if prof and prof.name else (row.professor_name or "")),
                    purpose=row.purpose or "",
                )
            )
        return lines

    def pass_for(self, visitors_id: Optional[str]) -> VisitorPass:
        """Visitor record plus office lines for the printed pass.

        Lines come from the office visits; when those cannot be loaded or are
        empty, the offices picked at registration are used.
        """
        visitors_id = (visitors_id or "").strip()
        if not visitors_id:
            raise ValidationError("No visitor ID provided.")

        try:
            visitor = self._visitors.get(visitors_id)
        except HttpStatusError as e:
            raise ValidationError(str(e) or "Failed to fetch visitor data.")
        if visitor is None:
            raise ValidationError("Visitor not found.")

        lines = self._lines(visitors_id)
        if not lines:
            lines = [
                PassLine(office=p.office, professor=p.professor or "", purpose="")
                for p in visitor.faculty_to_visit
            ]
        return VisitorPass(visitor=visitor, lines=lines)


@dataclass(frozen=True)
class VisitorStats:
    today: Optional[int]
    month: Optional[int]


class VisitorStatsService:
    def __init__(self, visitors: VisitorRepository):
        self._visitors = visitors

    def counts(self, *, now: Optional[datetime] = None) -> VisitorStats:
        """Visitors registered today and this month; None when unavailable."""
        today = manila_today(now)
        first, last = manila_month_bounds(today)
        try:
            with ThreadPoolExecutor(max_workers=2) as pool:
                today_f = pool.submit(self._visitors.list_created_on, today)
                month_f = pool.submit(self._visitors.list_created_between, first, last)
                return VisitorStats(today=len(today_f.result()), month=len(month_f.result()))
        except ApiError as e:
            logger.warning("Could not load visitor counts: %s", e)
            return VisitorStats(today=None, month=None)
