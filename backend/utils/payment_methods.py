"""
Payment method detail validation and key normalization.

Callers may nest the method details under the frontend discriminant
(``bank_transfer``) or under the canonical backend key (``bankTransfer``).
Validation accepts either; normalization re-nests the details under the single
canonical key so everything downstream reads one shape.
"""

from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Union

from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_snake

from models.payments import PaymentMethod
from schemas.payment_methods import (
    BankTransferDetails,
    CardDetails,
    CashDetails,
    ChequeDetails,
    OtherDetails,
    UpiDetails,
)

BACKEND_KEYS = {
    PaymentMethod.CASH.value: "cash",
    PaymentMethod.CHEQUE.value: "cheque",
    PaymentMethod.BANK_TRANSFER.value: "bankTransfer",
    PaymentMethod.UPI.value: "upi",
    PaymentMethod.CARD.value: "card",
    PaymentMethod.OTHER.value: "other",
}

DETAIL_MODELS = {
    PaymentMethod.CASH.value: CashDetails,
    PaymentMethod.CHEQUE.value: ChequeDetails,
    PaymentMethod.BANK_TRANSFER.value: BankTransferDetails,
    PaymentMethod.UPI.value: UpiDetails,
    PaymentMethod.CARD.value: CardDetails,
    PaymentMethod.OTHER.value: OtherDetails,
}

DEFAULT_REQUIRED_FIELDS = {
    PaymentMethod.CASH.value: (),
    PaymentMethod.CHEQUE.value: ("chequeNumber", "bankName", "issueDate"),
    PaymentMethod.BANK_TRANSFER.value: ("transferDate",),
    PaymentMethod.UPI.value: (),
    PaymentMethod.CARD.value: (),
    PaymentMethod.OTHER.value: ("methodName",),
}

# Stricter rule used by document families that record full remittance details
FULL_BANK_TRANSFER_FIELDS = ("bankName", "accountNumber", "ifscCode", "transactionId", "transferDate")

METHOD_LABELS = {
    PaymentMethod.CASH.value: "Cash",
    PaymentMethod.CHEQUE.value: "Cheque",
    PaymentMethod.BANK_TRANSFER.value: "Bank transfer",
    PaymentMethod.UPI.value: "UPI",
    PaymentMethod.CARD.value: "Card",
    PaymentMethod.OTHER.value: "Other",
}

FIELD_LABELS = {
    "receivedBy": "received by",
    "receiptNumber": "receipt number",
    "chequeNumber": "cheque number",
    "bankName": "bank name",
    "branchName": "branch name",
    "issueDate": "issue date",
    "clearanceDate": "clearance date",
    "accountHolderName": "account holder name",
    "accountNumber": "account number",
    "ifscCode": "IFSC code",
    "transactionId": "transaction ID",
    "transferDate": "transfer date",
    "referenceNumber": "reference number",
    "upiId": "UPI ID",
    "transactionReference": "transaction reference",
    "payerName": "payer name",
    "payerPhone": "payer phone",
    "cardType": "card type",
    "cardNetwork": "card network",
    "lastFourDigits": "last 4 digits",
    "authorizationCode": "authorization code",
    "cardHolderName": "card holder name",
    "methodName": "method name",
    "additionalDetails": "additional details",
}

MethodLike = Union[str, PaymentMethod]


def _method_value(payment_method: MethodLike) -> str:
    if isinstance(payment_method, PaymentMethod):
        return payment_method.value
    return payment_method


def backend_key(payment_method: MethodLike) -> str:
    """Canonical storage key for a payment method (``bank_transfer`` -> ``bankTransfer``)."""
    return BACKEND_KEYS[_method_value(payment_method)]


def extract_method_details(payment_method: MethodLike, details: Optional[Mapping[str, Any]]) -> Any:
    """Return the detail payload for ``payment_method`` from either key variant."""
    if not details:
        return {}
    method = _method_value(payment_method)
    if details.get(method) is not None:
        return details[method]
    return details.get(BACKEND_KEYS[method]) or {}


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _field_value(method_details: Mapping[str, Any], field: str) -> Any:
    value = method_details.get(field)
    if value is None:
        value = method_details.get(to_snake(field))
    return value


def validate_payment_method_details(
    payment_method: MethodLike,
    details: Any,
    required_fields: Optional[Mapping[str, Iterable[str]]] = None,
) -> Optional[str]:
    """
    Check that ``details`` carries what ``payment_method`` requires.

    Args:
        payment_method: The discriminant (``cash``, ``cheque``, ``bank_transfer``, ...)
        details: The raw paymentMethodDetails payload
        required_fields: Per-method overrides of the required camelCase fields,
            supplied by the document family

    Returns:
        None when the payload is acceptable, otherwise a human-readable message
        naming what is missing or malformed.
    """
    method = _method_value(payment_method)
    if method not in BACKEND_KEYS:
        return f"Invalid payment method '{method}'"
    if details is not None and not isinstance(details, Mapping):
        return "Payment method details must be an object"

    method_details = extract_method_details(method, details)
    label = METHOD_LABELS[method]
    if not isinstance(method_details, Mapping):
        return f"{label} details must be an object"

    overrides = required_fields or {}
    required = overrides.get(method, DEFAULT_REQUIRED_FIELDS[method])
    missing = [field for field in required if _is_blank(_field_value(method_details, field))]
    if missing:
        names = ", ".join(FIELD_LABELS.get(field, field) for field in missing)
        return f"{label} payment requires {names}"

    try:
        DETAIL_MODELS[method].model_validate(method_details)
    except PydanticValidationError as e:
        error = e.errors()[0]
        field = ".".join(str(part) for part in error["loc"])
        return f"Invalid {label.lower()} details: {field}: {error['msg']}"
    return None


def normalize_payment_method_details(payment_method: MethodLike, details: Any) -> Dict[str, Dict[str, Any]]:
    """
    Re-nest validated details under the one canonical backend key.

    Details submitted for other methods are dropped. Call only after
    validate_payment_method_details returned None.
    """
    method = _method_value(payment_method)
    parsed = DETAIL_MODELS[method].model_validate(extract_method_details(method, details))
    return {BACKEND_KEYS[method]: parsed.model_dump(mode="json", by_alias=True, exclude_none=True)}


def describe_payment_method_details(payment_method: MethodLike, stored: Optional[Mapping[str, Any]]) -> List[Tuple[str, str]]:
    """Label/value lines for a receipt, in the variant's field order."""
    method = _method_value(payment_method)
    method_details = (stored or {}).get(BACKEND_KEYS[method]) or {}
    lines = []
    for name, field in DETAIL_MODELS[method].model_fields.items():
        alias = field.alias or name
        value = method_details.get(alias)
        if _is_blank(value) or isinstance(value, (dict, list)):
            continue
        label = FIELD_LABELS.get(alias, alias)
        lines.append((label[0].upper() + label[1:], str(value)))
    return lines
