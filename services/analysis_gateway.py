"""Analysis gateway: turns deal parameters and an optional offering memorandum
into one narrative from the generative-language API.

The gateway always answers with renderable text. Validation problems are the
only failures returned as errors; a missing credential or any upstream failure
produces a canned narrative carrying FALLBACK_MARKER plus an explanation.
"""

import logging
from dataclasses import dataclass

from config import resolve_api_key
from errors import ConfigurationError, UpstreamError, ValidationError
from models.assumptions import DealInputs, parse_deal_inputs, prompt_fields
from models.financial_model import GOING_IN_CAP_RATE
from services.api_clients.gemini_client import GeminiClient
from services.document import decode_document, extract_text_from_pdf, truncate_for_prompt

logger = logging.getLogger(__name__)

NO_FILE_DATA = "No file data provided"
NO_ANALYSIS_MESSAGE = "No analysis could be extracted from the AI response."
FALLBACK_MARKER = "*Note: This is a fallback analysis"
MISSING_KEY_ERROR = (
    "API key not configured. Set GEMINI_API_KEY in the environment to enable AI analysis."
)
MIN_DOCUMENT_CHARS = 50


@dataclass(frozen=True)
class AnalysisRequest:
    file_name: str | None = None
    file_data: str | None = None        # base64 PDF
    extracted_text: str | None = None
    inputs: DealInputs | None = None


@dataclass(frozen=True)
class GatewayResponse:
    analysis: str
    error: str | None = None
    details: str | None = None
    fallback: bool = False

    def to_dict(self) -> dict:
        body = {"analysis": self.analysis}
        if self.error:
            body["error"] = self.error
        if self.details:
            body["details"] = self.details
        if self.fallback:
            body["fallback"] = True
        return body


def _optional_str(body: dict, key: str) -> str | None:
    value = body.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError(f"{key} must be a string", field=key)
    return value


def parse_request(body) -> AnalysisRequest:
    """Validate a decoded JSON body. Raises ValidationError."""
    if not isinstance(body, dict) or not body:
        raise ValidationError(NO_FILE_DATA)

    file_name = _optional_str(body, "fileName")
    file_data = _optional_str(body, "fileData")
    extracted_text = _optional_str(body, "extractedText")
    raw_inputs = body.get("inputs")

    if file_data is not None:
        decode_document(file_data)
    if extracted_text is not None and not extracted_text.strip():
        extracted_text = None
    if raw_inputs is not None and not isinstance(raw_inputs, dict):
        raise ValidationError("inputs must be an object", field="inputs")

    if file_data is None and extracted_text is None and raw_inputs is None:
        raise ValidationError(NO_FILE_DATA)

    return AnalysisRequest(
        file_name=file_name,
        file_data=file_data,
        extracted_text=extracted_text,
        inputs=parse_deal_inputs(raw_inputs) if raw_inputs is not None else None,
    )


def build_prompt(request: AnalysisRequest, document_text: str = None) -> str:
    """Analyst prompt for the deal; document_text is appended when available."""
    p = prompt_fields(request.inputs)
    has_document = bool(request.file_data or request.extracted_text)

    if has_document:
        doc_name = request.file_name or "offering memorandum"
        if document_text:
            doc_section = (
                f"DOCUMENT UPLOADED: {doc_name}\n"
                "The offering memorandum text is included at the end of this prompt. "
                "Base every section on the facts it contains, cite figures from it where "
                "possible, and note where it conflicts with the parameters above."
            )
        else:
            doc_section = (
                f"DOCUMENT UPLOADED: {doc_name}\n"
                "The offering memorandum is attached as a PDF. Base every section on the "
                "facts it contains and note where it conflicts with the parameters above."
            )
    else:
        doc_section = "No document provided for analysis"

    prompt = f"""You are a professional real estate investment analyst. Analyze this investment opportunity and provide a comprehensive report.

INVESTMENT PARAMETERS:
- Asking Price: ${p['asking_price']}
- Target Hold Period: {p['target_hold']} years
- Target IRR: {p['target_irr']}%
- Target Equity Multiple: {p['target_em']}x
- Leverage: {p['leverage']}%
- Interest Rate: {p['interest_rate']}%
- Exit Cap Rate: {p['exit_cap']}%
- Investment Strategy: {p['strategy']}
- Market Focus: {p['market_focus']}

TRANSACTION COSTS:
- Acquisition Fee: {p['acquisition_fee']}
- Closing Costs: {p['closing_costs']}
- Legal Costs: {p['legal_costs']}
- Debt Origination: {p['debt_origination']}

{doc_section}

Please provide a detailed real estate investment analysis with the following sections:

**Property Overview:**
- Property type and key characteristics
- Location and market positioning
- Physical attributes and condition

**Financial Analysis:**
- Current financial performance
- Revenue and expense breakdown
- Cash flow projections
- Return calculations

**Market Analysis:**
- Local market conditions
- Comparable properties
- Growth trends and outlook
- Supply and demand dynamics

**Investment Thesis:**
- Value creation opportunities
- Strategic advantages
- Upside potential

**Risk Assessment:**
- Market risks
- Property-specific risks
- Financial risks
- Mitigation strategies

**Recommendation:**
- Overall investment recommendation
- Key considerations for decision making
- Next steps for due diligence

Format your response in clear markdown with proper headings and bullet points. Be specific and professional in your analysis."""

    if document_text:
        prompt += f"\n\nOFFERING MEMORANDUM TEXT:\n{truncate_for_prompt(document_text)}"
    return prompt


def render_fallback(inputs: DealInputs | None, file_name: str = None, note: str = "") -> str:
    """Canned narrative built only from the deal parameters."""
    p = prompt_fields(inputs)
    if inputs is not None and inputs.asking_price:
        noi_line = f"${inputs.asking_price * GOING_IN_CAP_RATE / 1_000_000:.1f}M annually (estimated at a 5% cap rate)"
    else:
        noi_line = "Not available without an asking price"
    title = f"**Analysis Report for {file_name}**" if file_name else "**Analysis Report**"
    strategy = inputs.strategy if inputs is not None and inputs.strategy else "investment"

    return f"""{title}

**Property Overview:**
- Investment opportunity under evaluation
- Parameters provided for screening

**Financial Analysis:**
- Asking Price: ${p['asking_price']}
- Estimated Current NOI: {noi_line}
- Target Hold: {p['target_hold']} years
- Target IRR: {p['target_irr']}%
- Target EM: {p['target_em']}x
- Leverage: {p['leverage']}% at {p['interest_rate']}% interest
- Exit Cap Rate: {p['exit_cap']}%

**Investment Thesis:**
This {strategy} opportunity requires detailed analysis. Review the return projection alongside the offering memorandum before committing further resources.

**Recommendation:**
Proceed with comprehensive due diligence to validate investment assumptions and refine return projections.

{FALLBACK_MARKER} ({note}).*"""


class AnalysisGateway:
    """Stateless: every analyze() call resolves the credential and opens its own client."""

    def __init__(self, client_factory=GeminiClient, api_key_resolver=resolve_api_key):
        self.client_factory = client_factory
        self.api_key_resolver = api_key_resolver

    def _document_text(self, request: AnalysisRequest) -> str | None:
        if request.extracted_text:
            return request.extracted_text
        if request.file_data:
            text = extract_text_from_pdf(decode_document(request.file_data))
            if len(text.strip()) >= MIN_DOCUMENT_CHARS:
                return text
        return None

    def analyze(self, request: AnalysisRequest) -> GatewayResponse:
        """Call the upstream API once; degrade to a canned narrative on any failure."""
        logger.info(
            f"Analysis requested: file={bool(request.file_data)}, "
            f"text={bool(request.extracted_text)}, inputs={request.inputs is not None}"
        )
        try:
            api_key = self.api_key_resolver()
            logger.info(f"API key configured: {bool(api_key)}")
            if not api_key:
                raise ConfigurationError(MISSING_KEY_ERROR)

            document_text = self._document_text(request)
            pdf_base64 = request.file_data if request.file_data and not document_text else None
            prompt = build_prompt(request, document_text)
            logger.info(f"Constructed prompt length: {len(prompt)}")

            with self.client_factory(api_key) as client:
                text = client.generate_text(prompt, pdf_base64)

            if not text or not text.strip():
                logger.warning("Upstream response contained no candidate text")
                return GatewayResponse(analysis=NO_ANALYSIS_MESSAGE)
            logger.info(f"Extracted analysis text, length: {len(text)}")
            return GatewayResponse(analysis=text)

        except ConfigurationError as e:
            logger.warning(f"Gateway running without credential: {e}")
            return GatewayResponse(
                analysis=render_fallback(request.inputs, request.file_name,
                                         "AI analysis is not configured"),
                error=str(e),
                fallback=True,
            )
        except UpstreamError as e:
            logger.warning(f"Upstream failure ({type(e).__name__}): {e} {e.details or ''}")
            return GatewayResponse(
                analysis=render_fallback(request.inputs, request.file_name,
                                         f"{e.reason}. {e.remediation}"),
                error=str(e),
                details=e.details,
                fallback=True,
            )
        except Exception as e:
            logger.exception("Analysis gateway failed")
            return GatewayResponse(
                analysis=render_fallback(request.inputs, request.file_name,
                                         "generated in error recovery mode"),
                error="Analysis failed unexpectedly",
                details=str(e)[:200],
                fallback=True,
            )

    def handle(self, body) -> tuple[int, dict]:
        """Parse and answer a JSON body. Returns (status_code, response_body)."""
        try:
            request = parse_request(body)
        except ValidationError as e:
            logger.info(f"Rejected analysis request: {e}")
            return 400, {"error": str(e)}
        return 200, self.analyze(request).to_dict()
