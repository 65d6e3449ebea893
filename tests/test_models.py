import numpy as np
import pytest
from sklearn.model_selection import GridSearchCV

from bank_marketing.src.data.features import infer_feature_spec, split_xy
from bank_marketing.src.data.preprocess import clean_data
from bank_marketing.src.data.split import downsample_majority, stratified_train_test_split
from bank_marketing.src.models.classifiers import (
    MODEL_NAMES,
    ModelsConfig,
    RandomForestConfig,
    build_model,
    fit_models,
    load_model,
    save_model,
    unwrap_pipeline,
)


@pytest.fixture
def train_test(bank_frame):
    cleaned, _ = clean_data(bank_frame)
    spec = infer_feature_spec(cleaned)
    train, test = stratified_train_test_split(cleaned, random_state=0)
    train = downsample_majority(train, random_state=0)
    X_train, y_train = split_xy(train, spec)
    X_test, y_test = split_xy(test, spec)
    return spec, X_train, y_train, X_test, y_test


def test_fit_all_models(train_test, fast_config):
    spec, X_train, y_train, X_test, _ = train_test
    fitted = fit_models(X_train, y_train, spec, fast_config.models)

    assert list(fitted) == list(MODEL_NAMES)
    for model in fitted.values():
        proba = model.predict_proba(X_test)
        assert proba.shape == (len(X_test), 2)
        assert np.allclose(proba.sum(axis=1), 1.0)

    forest = fitted["random_forest"]
    assert isinstance(forest, GridSearchCV)
    assert forest.best_params_["model__max_features"] in ("sqrt", 0.5)
    assert unwrap_pipeline(forest).named_steps["model"].n_estimators == 25


def test_naive_bayes_uses_laplace_smoothing(train_test):
    spec, X_train, y_train, _, _ = train_test
    model = build_model("naive_bayes", spec).fit(X_train, y_train)
    nb = model.named_steps["model"]
    assert nb.alpha == 1.0
    # Smoothing keeps every category probability strictly positive.
    for log_probs in nb.feature_log_prob_:
        assert np.all(np.isfinite(log_probs))


def test_decision_tree_stopping_rules(train_test):
    spec, X_train, y_train, _, _ = train_test
    model = build_model("decision_tree", spec).fit(X_train, y_train)
    tree = model.named_steps["model"].tree_
    leaves = tree.children_left == -1
    assert tree.n_node_samples[leaves].min() >= 7


def test_fit_subset_of_models(train_test, fast_config):
    spec, X_train, y_train, _, _ = train_test
    fitted = fit_models(X_train, y_train, spec, fast_config.models, names=["decision_tree"])
    assert list(fitted) == ["decision_tree"]


def test_unknown_model_name(train_test):
    spec = train_test[0]
    with pytest.raises(ValueError):
        build_model("svm", spec)
    with pytest.raises(ValueError):
        ModelsConfig(enabled=("svm",))


def test_random_forest_config_validation():
    with pytest.raises(ValueError):
        RandomForestConfig(cv_folds=1)
    with pytest.raises(ValueError):
        RandomForestConfig(max_features_grid=())


def test_unwrap_unfitted_grid_search(train_test):
    spec = train_test[0]
    with pytest.raises(AttributeError):
        unwrap_pipeline(build_model("random_forest", spec))


def test_save_and_load_model(tmp_path, train_test):
    spec, X_train, y_train, X_test, _ = train_test
    model = build_model("decision_tree", spec).fit(X_train, y_train)
    path = save_model(model, tmp_path / "models" / "tree.joblib")
    restored = load_model(path)
    np.testing.assert_allclose(restored.predict_proba(X_test), model.predict_proba(X_test))

    with pytest.raises(FileNotFoundError):
        load_model(tmp_path / "missing.joblib")
