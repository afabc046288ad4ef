from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional

import requests

from invadmin.config import ApiSettings
from invadmin.repositories.api_client import ApiClient
from invadmin.repositories.rest_repo import RestRepository
from invadmin.services.catalog_service import CatalogController, Notice
from invadmin.services.excel_service import ExcelService
from invadmin.services.reporting_service import ReportingService
from invadmin.services.stock_service import StockService


@dataclass(frozen=True)
class AppContainer:
    settings: ApiSettings
    client: ApiClient
    repo: RestRepository
    stocks: StockService
    reporting: ReportingService
    excel: ExcelService

    def controller(
        self,
        resource: str,
        notify: Optional[Callable[[Notice], None]] = None,
        confirm: Optional[Callable[[str], bool]] = None,
    ) -> CatalogController:
        return CatalogController(
            self.repo,
            resource,
            page_size=self.settings.page_size,
            notify=notify,
            confirm=confirm,
            debounce_ms=self.settings.search_debounce_ms,
        )


def build_container(settings: ApiSettings | None = None, session: requests.Session | None = None) -> AppContainer:
    settings = settings or ApiSettings.from_env()
    client = ApiClient(settings, session=session)
    repo = RestRepository(client)

    return AppContainer(
        settings=settings,
        client=client,
        repo=repo,
        stocks=StockService(repo),
        reporting=ReportingService(repo),
        excel=ExcelService(),
    )
