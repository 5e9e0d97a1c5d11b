import warnings
from pathlib import Path

import numpy as np
import pytest

from imbalance_sweep.errors import DegenerateTrainingSet
from imbalance_sweep.models import EnsembleTree, LinearProbabilistic, make_classifier


def _xy(imbalanced_train_set):
    X = imbalanced_train_set[['x0', 'x1', 'x2']]
    y = (imbalanced_train_set['group'] == 'B').astype(int)
    return X, y


@pytest.mark.parametrize('clf', [
    LinearProbabilistic(random_state=0),
    EnsembleTree(n_estimators=20, random_state=0),
    EnsembleTree(backend='xgboost', n_estimators=20, random_state=0),
])
def test_classifiers_score_the_positive_class(clf, imbalanced_train_set):
    X, y = _xy(imbalanced_train_set)
    proba = clf.fit(X, y).positive_proba(X)
    assert proba.shape == (len(X),)
    assert np.all((proba >= 0) & (proba <= 1))
    # class B was shifted by +1.5 on every axis, so its rows should score higher
    assert proba[y.to_numpy() == 1].mean() > proba[y.to_numpy() == 0].mean()
    assert set(np.unique(clf.predict(X))) <= {0, 1}


@pytest.mark.parametrize('kind', ['logistic', 'forest', 'xgboost'])
def test_single_class_training_set_is_degenerate(kind, imbalanced_train_set):
    X, y = _xy(imbalanced_train_set)
    only_b = y == 1
    with pytest.raises(DegenerateTrainingSet):
        make_classifier(kind, random_state=0).fit(X[only_b], y[only_b])


def test_linear_reports_non_convergence_instead_of_failing(imbalanced_train_set):
    X, y = _xy(imbalanced_train_set)
    X_dup = np.vstack([X.to_numpy()] * 5)
    y_dup = np.concatenate([y.to_numpy()] * 5)
    clf = LinearProbabilistic(max_iter=1).fit(X_dup, y_dup)
    assert clf.converged is False
    assert clf.positive_proba(X_dup).shape == (len(X_dup),)


def test_linear_converges_on_separable_enough_data(imbalanced_train_set):
    X, y = _xy(imbalanced_train_set)
    assert LinearProbabilistic().fit(X, y).converged is True


def test_unfitted_classifier_refuses_to_score(imbalanced_train_set):
    X, _ = _xy(imbalanced_train_set)
    with pytest.raises(RuntimeError):
        LinearProbabilistic().positive_proba(X)


def test_make_classifier_names():
    assert isinstance(make_classifier('logistic', max_iter=50), LinearProbabilistic)
    assert make_classifier('forest').backend == 'random_forest'
    assert make_classifier('xgb').backend == 'xgboost'
    with pytest.raises(ValueError, match='Unknown classifier'):
        make_classifier('svm')
    with pytest.raises(ValueError, match='Unknown ensemble backend'):
        EnsembleTree(backend='lightgbm')


class _NoisyEstimator:
    classes_ = np.array([0, 1])

    def fit(self, X, y):
        warnings.warn('noisy input', UserWarning)
        return self


def test_linear_passes_other_warnings_on_from_their_origin(monkeypatch, imbalanced_train_set):
    X, y = _xy(imbalanced_train_set)
    monkeypatch.setattr(LinearProbabilistic, '_build', lambda self: _NoisyEstimator())
    with pytest.warns(UserWarning, match='noisy input') as record:
        clf = LinearProbabilistic().fit(X, y)
    assert clf.converged is True
    assert Path(record[0].filename).name == 'test_models.py'
