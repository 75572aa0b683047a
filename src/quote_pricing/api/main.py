from dataclasses import asdict
from fastapi import FastAPI, HTTPException
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field
from typing import Any, Dict, List, Optional

from quote_pricing import __version__
from quote_pricing.engine import LineItem, PricingConfig
from quote_pricing.exceptions import PricingError
from quote_pricing.logging_config import get_logger
from quote_pricing.services.config_loader import load_pricing_config, default_pricing_config, to_remote_payload
from quote_pricing.services.submission import build_submission_payload, verify_submission
from quote_pricing.services.validation import validate_quotation
from quote_pricing.api.state import engine, validator, settings

logger = get_logger(__name__)

app = FastAPI(
    title="Quote Pricing API",
    description="Quotation pricing and commission calculation for contractor quotes",
    version=__version__
)

# Enable CORS for frontend development
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


class PricingConfigIn(BaseModel):
    """Pricing configuration as reported by the configuration service."""
    platform_commission_percent: Optional[float] = None
    platform_overprice_percent: Optional[float] = None
    vat_rate: Optional[float] = None


class LineItemIn(BaseModel):
    serial_number: Optional[int] = None
    item_name: str = ""
    description: str = ""
    quantity: float
    unit_price: float


class CalcRequest(BaseModel):
    pricing_config: Optional[PricingConfigIn] = None
    line_items: List[LineItemIn] = Field(default_factory=list)
    validate_input: bool = True


class SubmissionRequest(CalcRequest):
    system_capacity_kwp: float
    extra: Dict[str, Any] = Field(default_factory=dict)


class VerifyRequest(BaseModel):
    pricing_config: Optional[PricingConfigIn] = None
    payload: Dict[str, Any]


def _resolve_config(config_in: Optional[PricingConfigIn]) -> PricingConfig:
    if config_in is None:
        return default_pricing_config(settings)
    return load_pricing_config(config_in.model_dump(), settings)


def _to_line_items(rows: List[LineItemIn]) -> list[LineItem]:
    return [
        LineItem(
            quantity=row.quantity,
            unit_price=row.unit_price,
            serial_number=row.serial_number if row.serial_number is not None else i,
            item_name=row.item_name,
            description=row.description,
        )
        for i, row in enumerate(rows, start=1)
    ]


def _unprocessable(e: PricingError) -> HTTPException:
    logger.info("Rejected request: %s", e)
    return HTTPException(status_code=422, detail={"errors": e.errors})


@app.get("/")
async def root():
    return {"status": "online", "message": "Quote Pricing API Active", "version": __version__}


@app.get("/pricing-config")
async def get_pricing_config():
    """Defaults applied when the configuration service omits a value."""
    return {"pricing_config": to_remote_payload(default_pricing_config(settings))}


@app.post("/calculate")
async def calculate_quotation(req: CalcRequest):
    try:
        config = _resolve_config(req.pricing_config)
        items = _to_line_items(req.line_items)

        if req.validate_input:
            validate_quotation(config, items, validator=validator)

        pairs = engine.breakdown(config, items)
        totals = engine.compute_quotation_totals(config, items, lines=[t for _, t in pairs])
    except PricingError as e:
        raise _unprocessable(e)

    return jsonable_encoder({
        "pricing_config": to_remote_payload(config),
        "line_items": [{**item.to_dict(), **asdict(line)} for item, line in pairs],
        "totals": totals.to_dict(),
    })


@app.post("/submission-preview")
async def submission_preview(req: SubmissionRequest):
    try:
        config = _resolve_config(req.pricing_config)
        items = _to_line_items(req.line_items)

        if req.validate_input:
            validate_quotation(config, items, validator=validator)

        return build_submission_payload(
            config, items, req.system_capacity_kwp,
            extra=req.extra, engine=engine, validator=validator,
        )
    except PricingError as e:
        raise _unprocessable(e)


@app.post("/verify")
async def verify_quotation(req: VerifyRequest):
    try:
        config = _resolve_config(req.pricing_config)
        mismatches = verify_submission(config, req.payload, settings=settings, engine=engine)
    except PricingError as e:
        raise _unprocessable(e)

    return {"consistent": not mismatches, "mismatches": mismatches}
