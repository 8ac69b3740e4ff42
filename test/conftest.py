import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))


def make_container(tmp_path: Path, name: str = "docs.db", settings=None):
    from aquarius.application.container import build_container
    from aquarius.config import DocumentSettings

    return build_container(tmp_path / name, settings or DocumentSettings())


def seed_parties(container, company: str = "Trade Evolution"):
    """One client for ``company`` and two catalog products; returns (client_id, [product_ids])."""
    client_id = container.clients.add_client(
        name="Maria Lopez",
        email="maria@acme.example",
        company=company,
        address="123 Main St\nPanama City",
        company_name="Acme Imports SA",
        tax_id="RUC-991",
    )
    p1 = container.products.add_product("Frozen Shrimp", "16/20 IQF", 50.0, "KG", "Seafood")
    p2 = container.products.add_product("Tilapia Fillet", "", 100.0, "KG")
    return client_id, [p1, p2]


def proforma(number: str, company: str = "Trade Evolution", issued_date: str = "2025-03-05", **kwargs):
    from aquarius.domain.models import Proforma

    kwargs.setdefault("id", number)
    return Proforma(
        proforma_number=number,
        client_id="c1",
        client_name="Acme",
        company=company,
        items=kwargs.pop("items", ()),
        currency="USD DOLLAR",
        sub_total=kwargs.pop("sub_total", 0.0),
        grand_total=kwargs.pop("grand_total", 0.0),
        issued_date=issued_date,
        **kwargs,
    )
