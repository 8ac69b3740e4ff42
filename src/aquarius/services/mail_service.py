from __future__ import annotations

from urllib.parse import quote

from aquarius.domain.errors import ValidationError
from aquarius.domain.models import Client

DOCUMENT_TITLES = {
    "proforma": "Proforma",
    "invoice": "Invoice",
    "packing_list": "Packing List",
    "bill_of_lading": "Bill of Lading",
}


def build_document_mailto(kind: str, document_number: str, company: str, client: Client, link: str) -> str:
    """mailto: link that hands a document link to the client's mail program."""
    title = DOCUMENT_TITLES.get(kind)
    if title is None:
        raise ValidationError(f"Unknown document kind: {kind}")
    if not client.email:
        raise ValidationError(f"Client {client.name} has no email address.")

    if kind == "bill_of_lading":
        subject = f"Bill of Lading for Proforma {document_number}"
        body = (
            f"Hello {client.name},\n\n"
            f"The Bill of Lading for Proforma {document_number} is available.\n\n"
            f"You can view and download it directly using this link:\n{link}\n\n"
            f"Thank you,\nThe {company} Team"
        )
    else:
        subject = f"{title} {document_number} from {company}"
        body = (
            f"Hello {client.name},\n\n"
            f"Please find your {title.lower()} available at the link below.\n\n"
            f"Document: {title} #{document_number}\nLink: {link}\n\n"
            f"Thank you,\nThe {company} Team"
        )

    return f"mailto:{client.email}?subject={quote(subject)}&body={quote(body)}"
