# Retarget/smoke_test.py
import argparse
import logging
from typing import Dict

import numpy as np
import pandas as pd

from Retarget import (
    BoxCoxStage,
    MutateStage,
    OLSRegressor,
    ScaleRangeStage,
    Task,
    target_trafo_graph,
)


def _make_trafo(name: str):
    if name == "log":
        return MutateStage(
            trafo=np.log,
            inverter=lambda p: {"response": np.exp(p.response)},
        )
    if name == "boxcox":
        return BoxCoxStage()
    if name == "scalerange":
        return ScaleRangeStage()
    if name == "none":
        return MutateStage()

    raise ValueError(f"Unknown trafo: {name}")


def run(
    csv_path: str,
    target_col: str,
    trafo: str = "log",
    test_fraction: float = 0.2,
    predict_type: str = "response",
) -> Dict[str, float]:
    df = pd.read_csv(csv_path)
    df = df[[c for c in df.columns if c == target_col or pd.api.types.is_numeric_dtype(df[c])]]
    task = Task(df, target=target_col, task_id=csv_path)

    n_test = max(1, int(round(task.nrow * test_fraction)))
    train_ids, test_ids = task.row_ids[:-n_test], task.row_ids[-n_test:]

    graph = target_trafo_graph(OLSRegressor(predict_type=predict_type), _make_trafo(trafo))
    graph.fit(task.filter(train_ids))
    prediction = graph.predict(task.filter(test_ids))

    scores = prediction.score(("rmse", "mae", "rsq"))
    for note in graph.notes:
        print(f"[NOTE] {note}")
    print(f"[OK] {trafo} / {graph.id}: " + ", ".join(f"{k}={v:.6g}" for k, v in scores.items()))
    return scores


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s")

    ap = argparse.ArgumentParser()
    ap.add_argument("--csv", required=True)
    ap.add_argument("--target", required=True)
    ap.add_argument(
        "--trafo",
        choices=["log", "boxcox", "scalerange", "none"],
        default="log",
        help="Target transformation wrapped around the OLS learner.",
    )
    ap.add_argument("--test-fraction", type=float, default=0.2)
    ap.add_argument("--predict-type", choices=["response", "se"], default="response")

    args = ap.parse_args()
    run(args.csv, args.target, args.trafo, args.test_fraction, args.predict_type)
