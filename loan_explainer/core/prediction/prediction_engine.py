"""
Loan prediction engine.

Vectorizes an application, scores it with the linear model and builds
the explanation payload from the exact contributions plus the SHAP and
LIME approximations.
"""

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Callable, Mapping, Optional

import numpy as np

from loan_explainer.core.errors import ComputationError, InvalidRequestError
from loan_explainer.core.scoring import FeatureVectorizer, LinearScorer, ScoreResult
from loan_explainer.data.bundle import ModelBundle, get_model_bundle
from loan_explainer.ml.explainability import (
    Contribution,
    ContributionRanker,
    ExplanationPayload,
    ExplanationSynthesizer,
    LIMEExplainer,
    LIMEExplanation,
    SHAPExplainer,
    SHAPExplanation,
)
from loan_explainer.utils.config import ExplainerSettings, get_settings
from loan_explainer.utils.constants import Decision
from loan_explainer.utils.logger import LoggerMixin, audit_log

# Floating-point faults surface as FloatingPointError instead of NaN/Inf
_FP_ERRSTATE = {"over": "raise", "invalid": "raise", "divide": "raise"}


def _guarded(func: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
    """Run func with floating-point faults raised (errstate is per thread)."""
    with np.errstate(**_FP_ERRSTATE):
        return func(*args, **kwargs)


def _check_seed(seed: Optional[int]) -> None:
    if seed is not None and seed < 0:
        raise InvalidRequestError(f"Seed must be a non-negative integer, got {seed}")


@dataclass
class PredictionResult:
    """Decision plus explanation for one application."""

    score: ScoreResult
    payload: ExplanationPayload

    @property
    def probability(self) -> float:
        return self.score.probability

    @property
    def decision(self) -> Decision:
        return self.score.decision

    @property
    def confidence(self) -> float:
        return self.score.confidence

    def to_dict(self) -> dict[str, Any]:
        """Convert to the response dictionary."""
        return {**self.score.to_dict(), **self.payload.to_dict()}


class PredictionEngine(LoggerMixin):
    """
    Scores loan applications and explains the outcome.

    The ranker, SHAP and LIME stages only read the standardized vector
    and the bundle, so they may run on worker threads. Each estimator
    draws from its own child generator, which keeps the output the same
    whether the stages run serially or in parallel.
    """

    def __init__(
        self,
        bundle: ModelBundle,
        vectorizer: Optional[FeatureVectorizer] = None,
        scorer: Optional[LinearScorer] = None,
        ranker: Optional[ContributionRanker] = None,
        shap_explainer: Optional[SHAPExplainer] = None,
        lime_explainer: Optional[LIMEExplainer] = None,
        synthesizer: Optional[ExplanationSynthesizer] = None,
        seed: Optional[int] = None,
        max_workers: int = 1,
        explain_approved: bool = True,
    ):
        """
        Initialize the prediction engine.

        Args:
            bundle: Validated model bundle.
            vectorizer: Record -> standardized vector encoder.
            scorer: Linear scorer shared by all stages.
            ranker: Exact contribution ranker.
            shap_explainer: Monte-Carlo SHAP approximator.
            lime_explainer: Local sensitivity approximator.
            synthesizer: Payload builder.
            seed: If set, every call starts from ``default_rng(seed)``.
                Must be non-negative.
            max_workers: Threads for the attribution stages (1 runs inline).
            explain_approved: Compute SHAP/LIME sections for approvals too.
        """
        _check_seed(seed)
        self.bundle = bundle
        self.scorer = scorer or LinearScorer()
        self.vectorizer = vectorizer or FeatureVectorizer()
        self.ranker = ranker or ContributionRanker()
        self.shap_explainer = shap_explainer or SHAPExplainer(scorer=self.scorer)
        self.lime_explainer = lime_explainer or LIMEExplainer(scorer=self.scorer)
        self.synthesizer = synthesizer or ExplanationSynthesizer()
        self.seed = seed
        self.max_workers = max_workers
        self.explain_approved = explain_approved

        unmapped = self.vectorizer.unmapped_fields(bundle)
        if unmapped:
            self.logger.warning(f"Bundle has no feature for configured fields: {unmapped}")

    @classmethod
    def from_settings(
        cls,
        bundle: ModelBundle,
        settings: Optional[ExplainerSettings] = None,
    ) -> "PredictionEngine":
        """Build an engine with every component sized from explainer settings."""
        settings = settings or get_settings().explainer
        scorer = LinearScorer()
        return cls(
            bundle=bundle,
            scorer=scorer,
            ranker=ContributionRanker(
                max_rejection_factors=settings.max_rejection_factors,
                max_approval_factors=settings.max_approval_factors,
            ),
            shap_explainer=SHAPExplainer(
                num_samples=settings.shap_num_samples,
                top_k=settings.shap_top_k,
                scorer=scorer,
            ),
            lime_explainer=LIMEExplainer(
                num_perturbations=settings.lime_num_perturbations,
                noise_scale=settings.lime_noise_scale,
                top_k=settings.lime_top_k,
                scorer=scorer,
            ),
            synthesizer=ExplanationSynthesizer(max_suggestions=settings.max_suggestions),
            seed=settings.random_seed,
            max_workers=settings.max_workers,
            explain_approved=settings.explain_approved,
        )

    def predict(self, record: Mapping[str, Any], seed: Optional[int] = None) -> PredictionResult:
        """
        Score and explain a raw application record.

        Args:
            record: Field name -> raw value. Missing or malformed fields
                are tolerated.
            seed: Per-call seed; identical seeds give identical results.

        Returns:
            PredictionResult

        Raises:
            BundleIntegrityError: If the bundle and encoder disagree on shape.
            InvalidRequestError: If the seed is negative.
            ComputationError: On a non-finite intermediate value.
        """
        vector = self.vectorizer.encode(record, self.bundle)
        return self.predict_vector(vector, seed=seed)

    def predict_vector(self, vector: np.ndarray, seed: Optional[int] = None) -> PredictionResult:
        """Score and explain an already standardized vector."""
        vector = np.asarray(vector, dtype=float)
        self.bundle.check_vector(vector)
        rng = self._generator(seed)

        try:
            score = _guarded(self.scorer.score, vector, self.bundle)
            contributions, shap, lime = self._attribute(vector, score.decision, rng)
        except FloatingPointError as e:
            self.logger.exception("Floating-point fault while scoring application")
            raise ComputationError() from e
        except ComputationError as e:
            self.logger.error(f"Scoring failed: {e.message}")
            raise

        payload = self.synthesizer.synthesize(score.decision, contributions, shap, lime)

        audit_log(
            "loan_scored",
            {
                "prediction": score.decision.value,
                "probability": round(score.probability, 4),
                "factors": [c.feature_name for c in contributions],
            },
            audit_type="DECISION",
        )
        self.logger.debug(
            f"Scored application: {score.decision.value} (p={score.probability:.4f})"
        )

        return PredictionResult(score=score, payload=payload)

    def _generator(self, seed: Optional[int]) -> np.random.Generator:
        """Fresh generator per call; nothing random is shared between requests."""
        _check_seed(seed)
        return np.random.default_rng(seed if seed is not None else self.seed)

    def _attribute(
        self,
        vector: np.ndarray,
        decision: Decision,
        rng: np.random.Generator,
    ) -> tuple[list[Contribution], Optional[SHAPExplanation], Optional[LIMEExplanation]]:
        """Run the ranker and both estimators on the same vector."""
        shap_rng, lime_rng = rng.spawn(2)
        run_estimators = decision == Decision.REJECTED or self.explain_approved

        if self.max_workers > 1:
            with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
                ranked = executor.submit(
                    _guarded, self.ranker.rank, vector, self.bundle, decision
                )
                shap_future = lime_future = None
                if run_estimators:
                    shap_future = executor.submit(
                        _guarded, self.shap_explainer.explain, vector, self.bundle, rng=shap_rng
                    )
                    lime_future = executor.submit(
                        _guarded, self.lime_explainer.explain, vector, self.bundle, rng=lime_rng
                    )
                return (
                    ranked.result(),
                    shap_future.result() if shap_future else None,
                    lime_future.result() if lime_future else None,
                )

        contributions = _guarded(self.ranker.rank, vector, self.bundle, decision)
        if not run_estimators:
            return contributions, None, None
        shap = _guarded(self.shap_explainer.explain, vector, self.bundle, rng=shap_rng)
        lime = _guarded(self.lime_explainer.explain, vector, self.bundle, rng=lime_rng)
        return contributions, shap, lime


# Singleton instance
_prediction_engine: Optional[PredictionEngine] = None


def get_prediction_engine() -> PredictionEngine:
    """Get the prediction engine singleton, built from the configured bundle."""
    global _prediction_engine
    if _prediction_engine is None:
        _prediction_engine = PredictionEngine.from_settings(get_model_bundle())
    return _prediction_engine
