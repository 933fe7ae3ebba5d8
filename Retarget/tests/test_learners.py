import numpy as np
import pandas as pd
import pytest

from Retarget import ConfigurationError, MeanRegressor, OLSRegressor, PhaseSequenceError, Task


def _task(**extra):
    df = pd.DataFrame({"x": [1.0, 2.0, 3.0, 4.0, 5.0], "y": [10, 20, 15, 30, 25], **extra})
    return Task(df, target="y")


def test_ols_fits_a_line():
    learner = OLSRegressor()
    learner.fit(_task())
    pred = learner.predict(_task())

    slope, intercept = np.polyfit([1, 2, 3, 4, 5], [10, 20, 15, 30, 25], 1)
    np.testing.assert_allclose(pred.response, intercept + slope * np.arange(1, 6))
    assert pred.se is None


def test_ols_se_and_intercept_toggle():
    learner = OLSRegressor(predict_type="se", fit_intercept=False)
    learner.fit(_task())
    pred = learner.predict(_task())
    assert pred.se is not None and np.all(pred.se > 0)
    assert learner.get_params() == {"fit_intercept": False}


def test_ols_checks():
    with pytest.raises(PhaseSequenceError):
        OLSRegressor().predict(_task())
    with pytest.raises(ConfigurationError):
        OLSRegressor().fit(_task(store=list("abcde")))
    with pytest.raises(ConfigurationError):
        OLSRegressor(predict_type="prob")

    learner = OLSRegressor()
    learner.fit(_task())
    with pytest.raises(ConfigurationError):
        learner.predict(_task(z=[0.0] * 5))


def test_mean_regressor():
    learner = MeanRegressor(predict_type="se")
    learner.fit(_task())
    pred = learner.predict(_task())
    np.testing.assert_allclose(pred.response, np.full(5, 20.0))
    np.testing.assert_allclose(pred.se, np.full(5, np.std([10, 20, 15, 30, 25], ddof=1)))
