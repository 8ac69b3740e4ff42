from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from aquarius.config import DocumentSettings, load_document_settings
from aquarius.repositories.sqlite_repo import SqliteRepository
from aquarius.services.client_service import ClientService
from aquarius.services.excel_service import ExcelService
from aquarius.services.numbering_service import NumberingService
from aquarius.services.product_service import ProductService
from aquarius.services.proforma_service import ProformaService
from aquarius.services.projection_service import DocumentProjector
from aquarius.services.reporting_service import ReportingService


@dataclass(frozen=True)
class AppContainer:
    repo: SqliteRepository
    settings: DocumentSettings
    numbering: NumberingService
    projector: DocumentProjector
    proformas: ProformaService
    clients: ClientService
    products: ProductService
    reporting: ReportingService
    excel: ExcelService


def build_container(db_path: Path | str, settings: DocumentSettings | None = None) -> AppContainer:
    repo = SqliteRepository(db_path)
    repo.init_db()

    settings = settings or load_document_settings()
    # The sqlite store doubles as the persisted invoice folio counter.
    numbering = NumberingService(settings, folio_counter=repo)
    projector = DocumentProjector(numbering, settings)
    proformas = ProformaService(repo, numbering)
    clients = ClientService(repo)
    products = ProductService(repo)
    reporting = ReportingService(repo)
    excel = ExcelService(products, clients)

    return AppContainer(
        repo=repo,
        settings=settings,
        numbering=numbering,
        projector=projector,
        proformas=proformas,
        clients=clients,
        products=products,
        reporting=reporting,
        excel=excel,
    )
