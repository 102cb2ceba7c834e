from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import requests

from .api.client import BackendClient
from .directory.http_directory_repository import (
    HttpOfficeRepository,
    HttpProfessorRepository,
    HttpServiceRepository,
    HttpUserAccountRepository,
)
from .directory.service import CatalogService, OfficeService, ProfessorService, ProfileService
from .scanner.lock import ScanLock
from .scanner.service import QrTagService
from .users.http_auth_gateway import HttpAuthGateway
from .users.service import AuthService
from .visitors.http_visitor_repository import HttpVisitorRepository
from .visitors.service import RegistrationService, VisitorPassService, VisitorStatsService
from .visits.http_visit_repository import HttpOfficeVisitRepository, HttpVisitorLogRepository
from .visits.service import VisitReportService


@dataclass(frozen=True)
class Container:
    client: BackendClient

    auth_service: AuthService
    visit_report_service: VisitReportService
    qr_tag_service: QrTagService
    registration_service: RegistrationService
    visitor_pass_service: VisitorPassService
    visitor_stats_service: VisitorStatsService
    office_service: OfficeService
    professor_service: ProfessorService
    profile_service: ProfileService
    catalog_service: CatalogService


def build_container(
    *,
    api_base: str,
    timeout: Optional[float] = None,
    scan_lock_seconds: float = 30,
    session: Optional[requests.Session] = None,
) -> Container:
    client = BackendClient(api_base, session=session, timeout=timeout)

    visits_repo = HttpOfficeVisitRepository(client)
    logs_repo = HttpVisitorLogRepository(client)
    visitors_repo = HttpVisitorRepository(client)
    offices_repo = HttpOfficeRepository(client)
    professors_repo = HttpProfessorRepository(client)
    services_repo = HttpServiceRepository(client)
    accounts_repo = HttpUserAccountRepository(client)

    return Container(
        client=client,
        auth_service=AuthService(HttpAuthGateway(client)),
        visit_report_service=VisitReportService(visits_repo, logs_repo, offices_repo, professors_repo, visitors_repo),
        qr_tag_service=QrTagService(visits_repo, logs_repo, visitors_repo, lock=ScanLock(scan_lock_seconds)),
        registration_service=RegistrationService(visitors_repo, logs_repo, offices_repo, professors_repo),
        visitor_pass_service=VisitorPassService(visitors_repo, visits_repo, offices_repo, professors_repo),
        visitor_stats_service=VisitorStatsService(visitors_repo),
        office_service=OfficeService(offices_repo),
        professor_service=ProfessorService(professors_repo, accounts_repo),
        profile_service=ProfileService(professors_repo),
        catalog_service=CatalogService(services_repo),
    )
