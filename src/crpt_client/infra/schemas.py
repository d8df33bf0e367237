from __future__ import annotations

from datetime import date
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class Product(BaseModel):
	"""A single product line of a document (wire names are snake_case)."""
	model_config = ConfigDict(populate_by_name=True)

	certificate_document: Optional[str] = None
	certificate_document_date: Optional[date] = None
	certificate_document_number: Optional[str] = None
	owner_inn: Optional[str] = None
	producer_inn: Optional[str] = None
	production_date: Optional[date] = None
	tnved_code: Optional[str] = None
	uit_code: Optional[str] = None
	uitu_code: Optional[str] = None


class Document(BaseModel):
	"""Goods introduction document posted to the create endpoint.

	Fields are not validated for business meaning; they are serialized as given.
	``import_request`` is sent as ``importRequest``.
	"""
	model_config = ConfigDict(populate_by_name=True)

	doc_id: Optional[str] = None
	doc_status: Optional[str] = None
	doc_type: Optional[str] = None
	import_request: bool = Field(False, alias="importRequest")
	owner_inn: Optional[str] = None
	participant_inn: Optional[str] = None
	producer_inn: Optional[str] = None
	production_date: Optional[date] = None
	production_type: Optional[str] = None
	products: list[Product] = Field(default_factory=list)
	reg_date: Optional[date] = None
	reg_number: Optional[str] = None


def sample_document() -> Document:
	"""Return a filled-in demo document, useful for smoke-testing an endpoint."""
	day = date(2024, 8, 10)
	return Document(
		doc_id="doc123",
		doc_status="NEW",
		doc_type="LP_INTRODUCE_GOODS",
		import_request=True,
		owner_inn="1234567890",
		participant_inn="0987654321",
		producer_inn="1122334455",
		production_date=day,
		production_type="PRODUCTION_TYPE",
		products=[
			Product(
				certificate_document="cert123",
				certificate_document_date=day,
				certificate_document_number="certnum123",
				owner_inn="1234567890",
				producer_inn="1122334455",
				production_date=day,
				tnved_code="010101",
				uit_code="uit123",
				uitu_code="uitu123",
			)
		],
		reg_date=day,
		reg_number="reg123",
	)
