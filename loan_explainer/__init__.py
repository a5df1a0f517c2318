"""
Explainable loan approval engine.

Scores an application record against a pre-trained linear classifier and
explains the decision with exact linear attributions, a Monte-Carlo Shapley
approximation and a perturbation-based local sensitivity estimate.
"""

from loan_explainer.utils.constants import APP_NAME, VERSION

__app_name__ = APP_NAME
__version__ = VERSION
