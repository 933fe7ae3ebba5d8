import numpy as np
import pytest

from Retarget import Prediction


def test_lengths_must_match_row_ids():
    with pytest.raises(ValueError):
        Prediction(row_ids=[0, 1, 2], response=[1.0, 2.0])
    with pytest.raises(ValueError):
        Prediction(row_ids=[0, 1], response=[1.0, 2.0], se=[0.1])


def test_from_dict_keeps_other_columns():
    pred = Prediction.from_dict({
        "row_ids": ["a", "b"],
        "response": [1.0, 2.0],
        "truth": [1.5, 2.5],
        "se": [0.1, 0.2],
        "q90": [3.0, 4.0],
    })

    assert pred.output_columns == ["response", "se", "q90"]
    assert len(pred) == 2

    slim = pred.without(["se", "q90"])
    assert slim.output_columns == ["response"]
    assert pred.se is not None  # original untouched


def test_response_cannot_be_dropped():
    pred = Prediction(row_ids=[0], response=[1.0])
    with pytest.raises(ValueError):
        pred.without(["response"])


def test_as_frame_and_score():
    pred = Prediction(row_ids=[10, 11], response=[1.0, 3.0], truth=[2.0, 3.0])

    frame = pred.as_frame()
    assert list(frame.index) == [10, 11]
    assert list(frame.columns) == ["truth", "response"]

    scores = pred.score(("mse", "mae", "rmse"))
    assert scores["mse"] == pytest.approx(0.5)
    assert scores["mae"] == pytest.approx(0.5)
    assert scores["rmse"] == pytest.approx(np.sqrt(0.5))


def test_score_needs_truth():
    pred = Prediction(row_ids=[0], response=[1.0])
    with pytest.raises(ValueError):
        pred.score()
    with pytest.raises(KeyError):
        Prediction(row_ids=[0], response=[1.0], truth=[1.0]).score(("nope",))
