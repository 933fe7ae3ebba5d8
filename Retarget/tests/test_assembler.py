import logging

import numpy as np
import pandas as pd
import pytest
import statsmodels.api as sm

from Retarget import (
    AssemblerConfig,
    ConfigurationError,
    GraphAssembler,
    InversionError,
    MutateStage,
    OLSRegressor,
    PhaseSequenceError,
    Prediction,
    ScaleRangeStage,
    Task,
    target_trafo_graph,
)

Y = np.array([10.0, 20.0, 15.0, 30.0, 25.0])
X = np.array([1.0, 2.0, 3.0, 4.0, 5.0])


def _task(x=X, y=Y, start=0):
    df = pd.DataFrame({"x": x, "y": y}, index=range(start, start + len(x)))
    return Task(df, target="y")


def _log_trafo():
    return MutateStage(trafo=np.log, inverter=lambda p: {"response": np.exp(p.response)})


def _manual_log_ols(x_train, y_train, x_new):
    fit = sm.OLS(np.log(y_train), sm.add_constant(x_train)).fit()
    return np.exp(fit.predict(sm.add_constant(x_new, has_constant="add")))


def test_graph_matches_manual_log_procedure():
    graph = target_trafo_graph(OLSRegressor(), _log_trafo())
    pred = graph.fit(_task()).predict(_task())

    np.testing.assert_allclose(pred.response, _manual_log_ols(X, Y, X), rtol=1e-10)
    np.testing.assert_allclose(pred.truth, Y)
    assert pred.row_ids == [0, 1, 2, 3, 4]


def test_graph_predicts_on_new_rows():
    graph = target_trafo_graph(OLSRegressor(), _log_trafo()).fit(_task())
    new = _task(x=np.array([6.0, 7.0]), y=np.array([35.0, 40.0]), start=0)
    pred = graph.predict(new)

    np.testing.assert_allclose(pred.response, _manual_log_ols(X, Y, np.array([6.0, 7.0])), rtol=1e-10)
    np.testing.assert_allclose(pred.truth, [35.0, 40.0])
    assert pred.score(("rmse",))["rmse"] >= 0.0


def test_composed_graph_hides_wiring():
    graph = target_trafo_graph(OLSRegressor(), _log_trafo())
    assert list(graph.graph.stages) == ["targetmutate", "regr_ols", "targetinvert"]
    assert graph.id == "targetmutate_regr_ols"

    with pytest.raises(PhaseSequenceError):
        graph.predict(_task())
    assert graph.fit(_task()) is graph
    assert graph.is_trained
    assert isinstance(graph.predict(_task()), Prediction)


def test_default_trafo_is_identity_mutate():
    plain = OLSRegressor()
    plain.fit(_task())
    expected = plain.predict(_task()).response

    graph = GraphAssembler().assemble(OLSRegressor()).fit(_task())
    np.testing.assert_allclose(graph.predict(_task()).response, expected)


def test_config_is_namespaced_per_stage():
    graph = target_trafo_graph(OLSRegressor(), _log_trafo())
    config = graph.get_config()
    assert config["regr_ols.fit_intercept"] is True
    assert "targetmutate.inverter" in config

    graph.set_config({"regr_ols.fit_intercept": False})
    assert graph.graph.stages["regr_ols"].predictor.params["fit_intercept"] is False


def test_any_transform_stage_can_be_plugged_in():
    # OLS with an intercept is equivariant under affine maps of the target
    scaled = target_trafo_graph(OLSRegressor(), ScaleRangeStage()).fit(_task())
    plain = target_trafo_graph(OLSRegressor()).fit(_task())
    np.testing.assert_allclose(scaled.predict(_task()).response, plain.predict(_task()).response)


def test_nested_graphs():
    inner = target_trafo_graph(OLSRegressor(), ScaleRangeStage())
    outer = target_trafo_graph(inner, _log_trafo())

    learner_id = "targettrafoscalerange_regr_ols"
    assert f"{learner_id}.targettrafoscalerange.lower" in outer.get_config()

    pred = outer.fit(_task()).predict(_task())
    np.testing.assert_allclose(pred.response, _manual_log_ols(X, Y, X), rtol=1e-8)

    outer.set_config({f"{learner_id}.targettrafoscalerange.upper": 2.0})
    assert inner.get_config()["targettrafoscalerange.upper"] == 2.0


def test_se_predictor_gets_a_diagnostic(caplog):
    with caplog.at_level(logging.WARNING):
        graph = target_trafo_graph(OLSRegressor(predict_type="se"), _log_trafo())

    assert graph.predict_type == "response"
    assert graph.notes and "standard errors" in graph.notes[0]
    assert any("standard errors" in r.getMessage() for r in caplog.records)

    with caplog.at_level(logging.WARNING):
        pred = graph.fit(_task()).predict(_task())
    assert pred.se is None
    assert any("cannot invert" in r.getMessage() for r in caplog.records)


def test_se_can_be_refused():
    graph = target_trafo_graph(
        OLSRegressor(predict_type="se"), _log_trafo(), unsupported_columns="error", warn_on_se=False
    )
    graph.fit(_task())
    with pytest.raises(InversionError):
        graph.predict(_task())


def test_se_survives_linear_trafo():
    graph = target_trafo_graph(OLSRegressor(predict_type="se"), ScaleRangeStage())
    assert graph.predict_type == "se"
    assert graph.notes == []

    pred = graph.fit(_task()).predict(_task())
    plain = OLSRegressor(predict_type="se")
    plain.fit(_task())
    np.testing.assert_allclose(pred.se, plain.predict(_task()).se)


def test_assembler_rejects_non_stages_and_non_predictors():
    with pytest.raises(ConfigurationError):
        GraphAssembler().assemble(OLSRegressor(), trafo=np.log)
    with pytest.raises(ConfigurationError):
        GraphAssembler(AssemblerConfig(learner_id="model")).assemble(object())


def test_failed_refit_leaves_graph_untrained():
    graph = target_trafo_graph(OLSRegressor(), ScaleRangeStage())
    graph.fit(_task())
    assert graph.is_trained

    bad = pd.DataFrame({"x": ["a", "b", "c"], "y": [1000.0, 2000.0, 3000.0]})
    with pytest.raises(ConfigurationError):
        graph.fit(Task(bad, target="y"))

    assert not graph.is_trained
    assert not graph.graph.stages["regr_ols"].is_trained
    with pytest.raises(PhaseSequenceError):
        graph.predict(_task())

    # a successful fit makes the graph usable again
    pred = graph.fit(_task()).predict(_task())
    plain = OLSRegressor()
    plain.fit(_task())
    np.testing.assert_allclose(pred.response, plain.predict(_task()).response)


def test_stage_policy_is_kept_when_config_leaves_it_unset():
    stage = _log_trafo().set_params(unsupported_columns="error")
    graph = target_trafo_graph(OLSRegressor(predict_type="se"), stage, warn_on_se=False)

    assert stage.get_params()["unsupported_columns"] == "error"
    assert "rejected" in graph.notes[0]
    graph.fit(_task())
    with pytest.raises(InversionError):
        graph.predict(_task())


def test_config_policy_overrides_stage_policy():
    stage = _log_trafo().set_params(unsupported_columns="error")
    target_trafo_graph(OLSRegressor(), stage, unsupported_columns="drop")
    assert stage.get_params()["unsupported_columns"] == "drop"
