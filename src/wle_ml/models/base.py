from abc import ABC, abstractmethod
import joblib


class BaseModel(ABC):
    """Classifier contract: ``fit(features, labels)`` then ``predict(features)``."""

    @abstractmethod
    def fit(self, X, y):
        pass

    @abstractmethod
    def predict(self, X):
        pass

    def save(self, path: str):
        joblib.dump(self, path)

    @staticmethod
    def load(path: str):
        return joblib.load(path)
