"""
analytics — Numerical core of the forecasting engine.

Sub-packages
------------
    analytics.forecasting   Statistics, features, sequence models, model
                            cache, trend fallback and the orchestrator.
    analytics.metrics       Residual error metrics and training accuracy.
"""
