from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from aquarius.domain.models import SUCCESSFUL_TRADE, TRADE_EVOLUTION


@dataclass(frozen=True)
class CompanyProfile:
    name: str
    tax_id: str
    phone: str
    address: str
    website: str
    signatory: str
    footer_text: Optional[str] = None


COMPANY_PROFILES: dict[str, CompanyProfile] = {
    TRADE_EVOLUTION: CompanyProfile(
        name="TradeEvolution OÜ",
        tax_id="1669512",
        phone="+372-5811-2114",
        address="Harju maakond, Tallinn, Kesklinna linnaosa, Pärnu mnt 139c, 11317, Estonia",
        website="www.trd-e.ee",
        signatory="Rubén Colín, CEO",
    ),
    SUCCESSFUL_TRADE: CompanyProfile(
        name="Successful Trade PTE LTD",
        tax_id="202334442E",
        phone="(+65) 8588 0588",
        address="160 Robinson Road, #14-04 Singapore Business Federation Centre, Singapore 068914",
        website="www.successfultrd.com",
        signatory="Management, Successful Trade PTE LTD",
        footer_text="This is a computer-generated document. No signature is required.",
    ),
}


def company_profile(company: str) -> Optional[CompanyProfile]:
    return COMPANY_PROFILES.get(company)
