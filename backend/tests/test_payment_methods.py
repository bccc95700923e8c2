from models.payments import PaymentMethod
from utils.payment_methods import (
    FULL_BANK_TRANSFER_FIELDS,
    backend_key,
    describe_payment_method_details,
    extract_method_details,
    normalize_payment_method_details,
    validate_payment_method_details,
)


def test_cash_needs_no_details():
    assert validate_payment_method_details("cash", None) is None
    assert validate_payment_method_details("cash", {}) is None
    assert normalize_payment_method_details("cash", None) == {"cash": {}}


def test_unknown_method_is_rejected():
    assert validate_payment_method_details("crypto", {}) == "Invalid payment method 'crypto'"


def test_details_must_be_an_object():
    assert validate_payment_method_details("cheque", ["123"]) == "Payment method details must be an object"


def test_cheque_lists_every_missing_field():
    error = validate_payment_method_details("cheque", {"cheque": {"chequeNumber": "000123"}})
    assert error == "Cheque payment requires bank name, issue date"


def test_blank_strings_count_as_missing():
    error = validate_payment_method_details(
        "cheque", {"cheque": {"chequeNumber": "  ", "bankName": "HDFC", "issueDate": "2026-10-01"}}
    )
    assert error == "Cheque payment requires cheque number"


def test_bank_transfer_accepts_either_key():
    details = {"transferDate": "2026-10-02", "transactionId": "UTR998877"}
    assert validate_payment_method_details("bank_transfer", {"bank_transfer": details}) is None
    assert validate_payment_method_details("bank_transfer", {"bankTransfer": details}) is None
    assert extract_method_details("bank_transfer", {"bankTransfer": details}) == details


def test_normalization_nests_under_backend_key():
    normalized = normalize_payment_method_details(
        PaymentMethod.BANK_TRANSFER,
        {"bank_transfer": {"transferDate": "2026-10-02", "transactionId": "UTR998877"}},
    )
    assert normalized == {"bankTransfer": {"transferDate": "2026-10-02", "transactionId": "UTR998877"}}
    assert backend_key("bank_transfer") == "bankTransfer"


def test_normalization_drops_details_of_other_methods():
    normalized = normalize_payment_method_details(
        "upi", {"upi": {"upiId": "anand@okhdfc"}, "cheque": {"chequeNumber": "1"}}
    )
    assert normalized == {"upi": {"upiId": "anand@okhdfc"}}


def test_snake_case_fields_are_accepted():
    details = {"cheque": {"cheque_number": "000123", "bank_name": "HDFC", "issue_date": "2026-10-01"}}
    assert validate_payment_method_details("cheque", details) is None
    assert normalize_payment_method_details("cheque", details) == {
        "cheque": {"chequeNumber": "000123", "bankName": "HDFC", "issueDate": "2026-10-01"}
    }


def test_family_override_requires_full_bank_transfer_details():
    required = {"bank_transfer": FULL_BANK_TRANSFER_FIELDS}
    error = validate_payment_method_details(
        "bank_transfer", {"bank_transfer": {"transferDate": "2026-10-02"}}, required
    )
    assert error == "Bank transfer payment requires bank name, account number, IFSC code, transaction ID"


def test_malformed_field_is_reported():
    error = validate_payment_method_details(
        "cheque", {"cheque": {"chequeNumber": "1", "bankName": "HDFC", "issueDate": "not-a-date"}}
    )
    assert error.startswith("Invalid cheque details: issueDate:")


def test_card_last_four_digits_pattern():
    assert validate_payment_method_details("card", {"card": {"lastFourDigits": "4242"}}) is None
    error = validate_payment_method_details("card", {"card": {"lastFourDigits": "42x"}})
    assert error.startswith("Invalid card details: lastFourDigits:")


def test_other_requires_method_name():
    assert validate_payment_method_details("other", {}) == "Other payment requires method name"


def test_describe_details_for_receipt():
    stored = {"cheque": {"chequeNumber": "000123", "bankName": "HDFC", "issueDate": "2026-10-01"}}
    assert describe_payment_method_details("cheque", stored) == [
        ("Cheque number", "000123"),
        ("Bank name", "HDFC"),
        ("Issue date", "2026-10-01"),
    ]
    assert describe_payment_method_details("cash", {}) == []
