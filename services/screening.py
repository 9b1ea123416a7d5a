"""Screen Investment: projection, score and narrative from one DealInputs snapshot."""

import logging
from dataclasses import dataclass, field

from errors import ValidationError
from models.assumptions import DealInputs, is_complete, with_defaults, to_dict
from models.financial_model import ReturnProjection, compute_returns
from models.metrics import sensitivity_table_exit_cap
from models.scoring import ScreeningScore, effective_targets, score, summary_text
from services.analysis_gateway import AnalysisGateway, AnalysisRequest, GatewayResponse

logger = logging.getLogger(__name__)

INCOMPLETE_MESSAGE = (
    "Please fill in all required fields or upload an offering memorandum."
)


@dataclass(frozen=True)
class AnalysisResult:
    inputs: DealInputs
    projection: ReturnProjection
    score: ScreeningScore
    narrative: GatewayResponse
    sensitivity: list = field(default_factory=list)
    used_defaults: bool = False

    def to_dict(self) -> dict:
        target_irr, target_em = effective_targets(self.inputs.target_irr, self.inputs.target_em)
        return {
            "inputs": to_dict(self.inputs),
            "returns": self.projection.to_display(),
            "projection": self.projection.to_dict(),
            "score": self.score.to_dict(),
            "summary": summary_text(self.score, self.projection),
            "targets": {"irr": target_irr, "em": target_em},
            "analysis": self.narrative.analysis,
            "analysis_error": self.narrative.error,
            "analysis_fallback": self.narrative.fallback,
            "sensitivity": self.sensitivity,
            "used_defaults": self.used_defaults,
        }


def prepare_inputs(inputs: DealInputs) -> tuple[DealInputs, bool]:
    """Require a complete form, or fill the blanks when a document was uploaded."""
    if is_complete(inputs):
        return inputs, False
    if inputs.document is not None:
        logger.info("Incomplete form with document attached; applying default parameters")
        return with_defaults(inputs), True
    raise ValidationError(INCOMPLETE_MESSAGE)


def screen_investment(inputs: DealInputs, gateway: AnalysisGateway = None) -> AnalysisResult:
    """Run the full screening for one snapshot.

    ValidationError and ComputationError propagate; upstream problems never do.
    """
    snapshot, used_defaults = prepare_inputs(inputs)

    projection = compute_returns(snapshot)
    screening_score = score(projection, snapshot.target_irr, snapshot.target_em)
    logger.info(
        f"Projection: IRR {projection.irr:.1f}%, EM {projection.equity_multiple:.2f}x, "
        f"feasibility {screening_score.return_feasibility}"
    )

    document = snapshot.document
    request = AnalysisRequest(
        file_name=document.name if document else None,
        file_data=document.file_data if document else None,
        extracted_text=document.extracted_text if document else None,
        inputs=snapshot,
    )
    narrative = (gateway or AnalysisGateway()).analyze(request)

    return AnalysisResult(
        inputs=snapshot,
        projection=projection,
        score=screening_score,
        narrative=narrative,
        sensitivity=sensitivity_table_exit_cap(snapshot),
        used_defaults=used_defaults,
    )
