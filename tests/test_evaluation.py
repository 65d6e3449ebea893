import numpy as np
import pandas as pd
import pytest

from bank_marketing.src.data.features import infer_feature_spec, split_xy
from bank_marketing.src.data.preprocess import clean_data
from bank_marketing.src.data.split import downsample_majority, stratified_train_test_split
from bank_marketing.src.evaluation.importance import IMPORTANCE_COLUMNS, variable_importance
from bank_marketing.src.evaluation.prediction import (
    ModelEvaluation,
    compare_models,
    compute_classification_metrics,
    compute_confusion_matrix,
    compute_roc,
    evaluate_model,
)
from bank_marketing.src.models.classifiers import fit_models

Y_TRUE = np.array([0, 0, 1, 1, 1])
Y_PRED = np.array([0, 1, 1, 1, 0])


def test_confusion_matrix_layout():
    cm = compute_confusion_matrix(Y_TRUE, Y_PRED)
    assert cm.loc["actual_no", "predicted_no"] == 1
    assert cm.loc["actual_no", "predicted_yes"] == 1
    assert cm.loc["actual_yes", "predicted_no"] == 1
    assert cm.loc["actual_yes", "predicted_yes"] == 2
    assert int(cm.to_numpy().sum()) == len(Y_TRUE)


def test_classification_metrics():
    m = compute_classification_metrics(Y_TRUE, Y_PRED, np.array([0.1, 0.6, 0.9, 0.8, 0.4]))
    assert m["accuracy"] == pytest.approx(0.6)
    assert m["precision"] == pytest.approx(2 / 3)
    assert m["recall"] == pytest.approx(2 / 3)
    assert m["specificity"] == pytest.approx(0.5)
    assert m["support_pos"] == 3
    assert m["support_neg"] == 2
    # positives scored 0.9, 0.8, 0.4 vs negatives 0.1, 0.6
    assert m["auc"] == pytest.approx(5 / 6)


def test_metrics_single_class_has_no_auc():
    m = compute_classification_metrics(np.ones(4), np.ones(4), np.array([0.2, 0.4, 0.6, 0.8]))
    assert m["auc"] is None
    assert m["average_precision"] is None
    assert m["accuracy"] == 1.0

    with pytest.raises(ValueError):
        compute_roc(np.ones(4), np.array([0.2, 0.4, 0.6, 0.8]))


def test_compute_roc_endpoints():
    roc = compute_roc(Y_TRUE, np.array([0.1, 0.6, 0.9, 0.8, 0.4]))
    assert list(roc.columns) == ["fpr", "tpr", "threshold"]
    assert roc["fpr"].iloc[0] == 0.0 and roc["tpr"].iloc[0] == 0.0
    assert roc["fpr"].iloc[-1] == 1.0 and roc["tpr"].iloc[-1] == 1.0
    assert roc["fpr"].is_monotonic_increasing


def _evaluation(name, auc):
    return ModelEvaluation(
        name=name,
        metrics={"accuracy": 0.5, "auc": auc},
        confusion=pd.DataFrame(),
        roc=pd.DataFrame(),
        probabilities=pd.Series(dtype=float),
        predictions=pd.Series(dtype=int),
    )


def test_compare_models_sorted_by_auc():
    table = compare_models([_evaluation("a", 0.7), _evaluation("b", None), _evaluation("c", 0.9)])
    assert table["model"].tolist() == ["c", "a", "b"]


@pytest.fixture
def fitted(bank_frame, fast_config):
    cleaned, _ = clean_data(bank_frame)
    spec = infer_feature_spec(cleaned)
    train, test = stratified_train_test_split(cleaned, random_state=0)
    train = downsample_majority(train, random_state=0)
    X_train, y_train = split_xy(train, spec)
    X_test, y_test = split_xy(test, spec)
    models = fit_models(X_train, y_train, spec, fast_config.models)
    return spec, models, X_test, y_test


def test_evaluate_model_on_test_split(fitted):
    _, models, X_test, y_test = fitted
    ev = evaluate_model("random_forest", models["random_forest"], X_test, y_test)
    assert int(ev.confusion.to_numpy().sum()) == len(y_test)
    assert 0.0 <= ev.metrics["accuracy"] <= 1.0
    assert 0.0 <= ev.metrics["auc"] <= 1.0
    assert set(ev.predictions.unique()) <= {0, 1}
    assert ev.probabilities.between(0.0, 1.0).all()
    assert set(ev.ranking) == {"base_rate", "precision_top", "recall_top", "lift_top"}

    with pytest.raises(ValueError):
        evaluate_model("random_forest", models["random_forest"], X_test, y_test, threshold=1.5)


def test_native_importance_for_trees(fitted):
    spec, models, X_test, y_test = fitted
    for name in ("decision_tree", "random_forest"):
        table = variable_importance(name, models[name], X_test, y_test, spec)
        assert list(table.columns) == IMPORTANCE_COLUMNS
        assert (table["method"] == "native").all()
        assert sorted(table["variable"]) == sorted(spec.feature_names)
        assert table["importance"].sum() == pytest.approx(1.0)
        assert table["importance"].is_monotonic_decreasing


def test_permutation_importance_for_naive_bayes(fitted):
    spec, models, X_test, y_test = fitted
    table = variable_importance("naive_bayes", models["naive_bayes"], X_test, y_test, spec, n_repeats=2)
    assert (table["method"] == "permutation").all()
    assert sorted(table["variable"]) == sorted(spec.feature_names)
    # duration drives the synthetic target
    assert table["variable"].iloc[0] == "duration"

    with pytest.raises(AttributeError):
        variable_importance("naive_bayes", models["naive_bayes"], X_test, y_test, spec, method="native")
    with pytest.raises(ValueError):
        variable_importance("naive_bayes", models["naive_bayes"], X_test, y_test, spec, method="gain")
