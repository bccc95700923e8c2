from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import Optional, Dict, Any, Literal
from datetime import date


class MethodDetails(BaseModel):
    """Stored under the canonical backend key with camelCase field names."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


class CashDetails(MethodDetails):
    received_by: Optional[str] = None
    receipt_number: Optional[str] = None


class ChequeDetails(MethodDetails):
    cheque_number: Optional[str] = None
    bank_name: Optional[str] = None
    branch_name: Optional[str] = None
    issue_date: Optional[date] = None
    clearance_date: Optional[date] = None
    account_holder_name: Optional[str] = None
    account_number: Optional[str] = None
    ifsc_code: Optional[str] = None


class BankTransferDetails(MethodDetails):
    bank_name: Optional[str] = None
    branch_name: Optional[str] = None
    account_number: Optional[str] = None
    ifsc_code: Optional[str] = None
    transaction_id: Optional[str] = None
    transfer_date: Optional[date] = None
    account_holder_name: Optional[str] = None
    reference_number: Optional[str] = None


class UpiDetails(MethodDetails):
    upi_id: Optional[str] = None
    transaction_id: Optional[str] = None
    transaction_reference: Optional[str] = None
    payer_name: Optional[str] = None
    payer_phone: Optional[str] = None


class CardDetails(MethodDetails):
    card_type: Optional[Literal["credit", "debit", "prepaid"]] = None
    card_network: Optional[Literal["visa", "mastercard", "amex", "rupay", "other"]] = None
    last_four_digits: Optional[str] = Field(default=None, pattern=r"^\d{4}$")
    transaction_id: Optional[str] = None
    authorization_code: Optional[str] = None
    card_holder_name: Optional[str] = None


class OtherDetails(MethodDetails):
    method_name: Optional[str] = None
    reference_number: Optional[str] = None
    additional_details: Optional[Dict[str, Any]] = None
