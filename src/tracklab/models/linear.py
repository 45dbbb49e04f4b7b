"""Linear-family adapters: OLS, lasso and logistic regression.

All three one-hot encode the categorical predictors (first level dropped).
OLS fits on raw continuous scales so its coefficients keep their units;
lasso and logistic standardize first so the penalty treats every predictor
alike.

Key Classes:
    LinearRegressionAdapter - OLS with a coefficient significance table
    LassoAdapter - L1 penalty chosen by seeded K-fold CV over a grid
    LogisticRegressionAdapter - Positive-class probabilities for the Evaluator
"""

from __future__ import annotations

from typing import Any, Dict, Optional, Sequence, Tuple

import numpy as np
import pandas as pd
from scipy import stats
from sklearn.linear_model import LassoCV, LinearRegression, LogisticRegression
from sklearn.model_selection import KFold
from sklearn.pipeline import make_pipeline

from tracklab.config import LASSO_ALPHAS, NEAR_ZERO_PENALTY
from tracklab.models.base import FitOptions, ModelAdapter, feature_names


def coefficient_table(
    design: np.ndarray,
    y: np.ndarray,
    intercept: float,
    coef: np.ndarray,
    names: Sequence[str],
) -> pd.DataFrame:
    """OLS coefficient significance (classical, homoskedastic errors).

    Args:
        design: Transformed predictor matrix (n_samples, n_features)
        y: Target values
        intercept: Fitted intercept
        coef: Fitted coefficients
        names: Column names of `design`

    Returns:
        DataFrame indexed by term with coef, std_err, t_stat, p_value

    Raises:
        ValueError: If there are no residual degrees of freedom
    """
    n, p = design.shape
    dof = n - p - 1
    if dof <= 0:
        raise ValueError(f"no residual degrees of freedom ({n} rows, {p} terms)")

    A = np.column_stack([np.ones(n), design])
    beta = np.concatenate([[intercept], coef])
    resid = y - A @ beta
    sigma2 = float(resid @ resid) / dof

    cov = sigma2 * np.linalg.pinv(A.T @ A)
    std_err = np.sqrt(np.clip(np.diag(cov), 0.0, None))
    with np.errstate(divide="ignore", invalid="ignore"):
        t_stat = np.where(std_err > 0, beta / std_err, np.nan)
    p_value = 2 * stats.t.sf(np.abs(t_stat), dof)

    return pd.DataFrame(
        {"coef": beta, "std_err": std_err, "t_stat": t_stat, "p_value": p_value},
        index=["(intercept)"] + list(names),
    )


class LinearRegressionAdapter(ModelAdapter):
    """Ordinary least squares on all 15 predictors."""

    task = "regression"
    output = "continuous"
    encoding = "onehot"
    scale = False

    def __init__(self, name: str = "linear_regression", alpha_level: float = 0.05, **kwargs):
        super().__init__(name, **kwargs)
        self.alpha_level = alpha_level

    def _fit(self, X: pd.DataFrame, y: np.ndarray, options: FitOptions) -> Tuple[Any, Dict[str, Any]]:
        pipe = make_pipeline(self._preprocessor(list(X.columns)), LinearRegression())
        pipe.fit(X, y)

        design = pipe[:-1].transform(X)
        model = pipe[-1]
        table = coefficient_table(design, y.astype(float), model.intercept_, model.coef_, feature_names(pipe))
        significant = table.index[(table["p_value"] < self.alpha_level)].tolist()

        return pipe, {
            "coefficients": table,
            "significant_terms": [t for t in significant if t != "(intercept)"],
            "r_squared": float(pipe.score(X, y)),
        }


class LassoAdapter(ModelAdapter):
    """L1-penalized linear regression, penalty picked by cross-validation.

    An optimal penalty at or below NEAR_ZERO_PENALTY means the data favour
    keeping every predictor.
    """

    task = "regression"
    output = "continuous"
    encoding = "onehot"
    scale = True

    def __init__(self, name: str = "lasso", alphas: Optional[Sequence[float]] = None, **kwargs):
        super().__init__(name, **kwargs)
        self.alphas = list(alphas or LASSO_ALPHAS)

    def _fit(self, X: pd.DataFrame, y: np.ndarray, options: FitOptions) -> Tuple[Any, Dict[str, Any]]:
        cv = KFold(n_splits=options.cv_folds, shuffle=True, random_state=options.seed)
        lasso = LassoCV(alphas=self.alphas, cv=cv, max_iter=10_000, random_state=options.seed)
        pipe = make_pipeline(self._preprocessor(list(X.columns)), lasso)
        pipe.fit(X, y)

        model = pipe[-1]
        coefs = pd.Series(model.coef_, index=feature_names(pipe))
        cv_mse = pd.Series(model.mse_path_.mean(axis=1), index=model.alphas_).sort_index()

        return pipe, {
            "alpha": float(model.alpha_),
            "keeps_all_predictors": bool(model.alpha_ <= NEAR_ZERO_PENALTY),
            "coefficients": coefs,
            "selected": coefs.index[coefs != 0].tolist(),
            "dropped": coefs.index[coefs == 0].tolist(),
            "cv_mse": cv_mse,
        }


class LogisticRegressionAdapter(ModelAdapter):
    """Binary logistic regression returning P(target = 1).

    Thresholding is left to the Evaluator so the same probabilities can be
    scored at any cut-off without refitting.
    """

    task = "classification"
    output = "probability"
    encoding = "onehot"
    scale = True

    def __init__(self, name: str = "logistic_regression", C: float = 1.0, **kwargs):
        super().__init__(name, **kwargs)
        self.C = C

    def _fit(self, X: pd.DataFrame, y: np.ndarray, options: FitOptions) -> Tuple[Any, Dict[str, Any]]:
        pipe = make_pipeline(
            self._preprocessor(list(X.columns)),
            LogisticRegression(C=self.C, max_iter=1000),
        )
        pipe.fit(X, y)

        model = pipe[-1]
        coefs = pd.Series(model.coef_[0], index=feature_names(pipe))
        return pipe, {
            "coefficients": coefs.sort_values(key=np.abs, ascending=False),
            "intercept": float(model.intercept_[0]),
        }

    def _predict(self, estimator: Any, X: pd.DataFrame) -> np.ndarray:
        positive = list(estimator.classes_).index(1)
        return estimator.predict_proba(X)[:, positive]
