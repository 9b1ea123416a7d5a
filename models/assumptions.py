from dataclasses import dataclass, fields, replace

from errors import ValidationError

STRATEGIES = ("Core", "Core-plus", "Value-add", "Opportunistic")

REQUIRED_FIELDS = (
    "asking_price", "target_hold", "target_irr", "target_em",
    "leverage", "interest_rate", "exit_cap",
)

# Substituted for missing fields when only an offering memorandum is supplied
DEFAULT_INPUTS = {
    "asking_price": 50_000_000.0,
    "target_hold": 5.0,
    "target_irr": 15.0,
    "target_em": 1.8,
    "leverage": 70.0,
    "interest_rate": 6.5,
    "exit_cap": 5.0,
    "strategy": "Value-add",
}

NOT_SPECIFIED = "Not specified"

# Upper bound on targetHold, in years
MAX_HOLD_YEARS = 100

# Request/form key -> DealInputs attribute
FIELD_KEYS = {
    "askingPrice": "asking_price",
    "targetHold": "target_hold",
    "targetIRR": "target_irr",
    "targetEM": "target_em",
    "leverage": "leverage",
    "interestRate": "interest_rate",
    "exitCap": "exit_cap",
    "acquisitionFee": "acquisition_fee",
    "closingCosts": "closing_costs",
    "legalCosts": "legal_costs",
    "debtOrigination": "debt_origination",
}


@dataclass(frozen=True)
class UploadedDocument:
    """An offering memorandum: base64 payload and/or text already extracted from it."""
    name: str = ""
    file_data: str | None = None       # base64
    extracted_text: str | None = None


@dataclass(frozen=True)
class DealInputs:
    """Snapshot of the screening form. None means the user left the field blank."""
    asking_price: float | None = None   # $
    target_hold: float | None = None    # years
    target_irr: float | None = None     # %
    target_em: float | None = None      # x
    leverage: float | None = None       # % LTV, 0-100
    interest_rate: float | None = None  # %
    exit_cap: float | None = None       # %
    strategy: str | None = None
    market_focus: str | None = None
    # Transaction costs (informational, passed to the narrative only)
    acquisition_fee: float | None = None
    closing_costs: float | None = None
    legal_costs: float | None = None
    debt_origination: float | None = None
    document: UploadedDocument | None = None


def _parse_number(key: str, value) -> float | None:
    """Accept numbers or numeric strings; blank means absent."""
    if value is None:
        return None
    if isinstance(value, bool):
        raise ValidationError(f"{key} must be a number", field=key)
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        text = value.strip().replace(",", "").lstrip("$").rstrip("%x")
        if not text:
            return None
        try:
            number = float(text)
        except ValueError:
            raise ValidationError(f"{key} must be a number, got {value!r}", field=key)
    else:
        raise ValidationError(f"{key} must be a number", field=key)
    if number != number or number in (float("inf"), float("-inf")):
        raise ValidationError(f"{key} must be a finite number", field=key)
    return number


def _parse_text(key: str, value) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError(f"{key} must be a string", field=key)
    return value.strip() or None


def parse_deal_inputs(data, document: UploadedDocument = None) -> DealInputs:
    """Parse a JSON object or form mapping (camelCase keys) into DealInputs."""
    if data is None:
        data = {}
    if not hasattr(data, "get"):
        raise ValidationError("inputs must be an object", field="inputs")

    values = {}
    for key, attr in FIELD_KEYS.items():
        values[attr] = _parse_number(key, data.get(key))

    if values["asking_price"] is not None and values["asking_price"] < 0:
        raise ValidationError("askingPrice cannot be negative", field="askingPrice")
    hold = values["target_hold"]
    if hold is not None and not 0 < hold <= MAX_HOLD_YEARS:
        raise ValidationError(
            f"targetHold must be greater than zero and at most {MAX_HOLD_YEARS} years",
            field="targetHold",
        )
    if values["leverage"] is not None and not 0 <= values["leverage"] <= 100:
        raise ValidationError("leverage must be between 0 and 100", field="leverage")

    strategy = _parse_text("strategy", data.get("strategy"))
    if strategy is not None and strategy not in STRATEGIES:
        raise ValidationError(
            f"strategy must be one of {', '.join(STRATEGIES)}", field="strategy"
        )

    return DealInputs(
        strategy=strategy,
        market_focus=_parse_text("marketFocus", data.get("marketFocus")),
        document=document,
        **values,
    )


def is_complete(inputs: DealInputs) -> bool:
    """True when every field the calculator needs was supplied."""
    return all(getattr(inputs, name) is not None for name in REQUIRED_FIELDS)


def with_defaults(inputs: DealInputs) -> DealInputs:
    """Fill blank fields from DEFAULT_INPUTS, leaving supplied values alone."""
    missing = {
        name: value for name, value in DEFAULT_INPUTS.items()
        if getattr(inputs, name) is None
    }
    return replace(inputs, **missing) if missing else inputs


def _fmt(value) -> str:
    if value is None:
        return NOT_SPECIFIED
    if isinstance(value, float) and value.is_integer():
        return f"{int(value):,}"
    if isinstance(value, float):
        return f"{value:,.2f}".rstrip("0").rstrip(".")
    return str(value)


def prompt_fields(inputs: DealInputs | None) -> dict:
    """Display strings for every deal parameter, 'Not specified' where blank.

    This is the only place blank fields are defaulted for narrative text.
    """
    inputs = inputs or DealInputs()
    return {
        "asking_price": _fmt(inputs.asking_price),
        "target_hold": _fmt(inputs.target_hold),
        "target_irr": _fmt(inputs.target_irr),
        "target_em": _fmt(inputs.target_em),
        "leverage": _fmt(inputs.leverage),
        "interest_rate": _fmt(inputs.interest_rate),
        "exit_cap": _fmt(inputs.exit_cap),
        "strategy": inputs.strategy or NOT_SPECIFIED,
        "market_focus": inputs.market_focus or NOT_SPECIFIED,
        "acquisition_fee": _fmt(inputs.acquisition_fee),
        "closing_costs": _fmt(inputs.closing_costs),
        "legal_costs": _fmt(inputs.legal_costs),
        "debt_origination": _fmt(inputs.debt_origination),
    }


def to_dict(inputs: DealInputs) -> dict:
    """Convert to a JSON-friendly dict using the request's camelCase keys."""
    attr_to_key = {attr: key for key, attr in FIELD_KEYS.items()}
    result = {}
    for f in fields(inputs):
        if f.name == "document":
            continue
        value = getattr(inputs, f.name)
        if f.name == "market_focus":
            result["marketFocus"] = value
        else:
            result[attr_to_key.get(f.name, f.name)] = value
    if inputs.document is not None:
        result["document"] = {
            "name": inputs.document.name,
            "hasFileData": inputs.document.file_data is not None,
            "hasExtractedText": inputs.document.extracted_text is not None,
        }
    return result
