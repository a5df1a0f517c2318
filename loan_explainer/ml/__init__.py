"""
Machine Learning modules for the loan decision explainer.

Submodules:
- explainability: Linear attributions, SHAP and LIME explanations
"""
