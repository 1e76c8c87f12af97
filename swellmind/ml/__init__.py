"""Per-user rating models.

Modules
-------
regressor  - Regressor strategy: FullOLS (numpy lstsq) and FixedApproximation
trainer    - train_user_model(), training_error(), model_type_for_count()
predictor  - linear prediction and the 0-100 learned score
"""
