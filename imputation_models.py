# imputation_models.py
"""
Pre-trained predictors used to fill missing project parameters.

Two exported artifacts are loaded from the models directory:

* ``lr_coefficients.json`` - a single-feature linear regression per material
  estimating processing energy (kWh/kg) from recycled content (%).
* ``tree_model.json`` - a regression tree over one-hot encoded material,
  product type and region, predicting the end-of-life recycling rate as a
  0-1 fraction.

Only inference lives here; the artifacts are produced offline.
"""
import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional, Union

from pydantic import BaseModel, ConfigDict, ValidationError

import lca_settings
from lci_data import ReferenceDataError

logger = logging.getLogger(__name__)

# Feature set the recycling-rate tree was trained on, in export order
TREE_FEATURES = [
    'material_Aluminium', 'material_Copper',
    'product_type_Automotive Components', 'product_type_Beverage Can',
    'product_type_Building Construction', 'product_type_Cookware',
    'product_type_Electronics (PCB)', 'product_type_Industrial Cable',
    'product_type_Packaging Foil',
    'region_EU', 'region_IN', 'region_NA', 'region_SEA',
]


def _read_json(path):
    path = Path(path)
    try:
        with path.open(encoding='utf-8') as fh:
            return json.load(fh)
    except FileNotFoundError:
        raise ReferenceDataError(f"Model artifact '{path}' not found") from None


class LinearCoefficients(BaseModel):
    slope: float
    intercept: float


class LinearModelArtifact(BaseModel):
    model_config = ConfigDict(protected_namespaces=())

    model_name: str = 'linear_regression'
    coefficients: Dict[str, LinearCoefficients]


class LinearEnergyModel:
    """predicted = slope * recycled_content_percent + intercept, per material."""

    def __init__(self, model_name, coefficients):
        self.model_name = model_name
        self.coefficients = dict(coefficients)

    @classmethod
    def from_dict(cls, payload):
        try:
            artifact = LinearModelArtifact.model_validate(payload)
        except ValidationError as e:
            raise ReferenceDataError(f"Invalid linear model coefficients: {e}") from e
        coefficients = {material: (c.slope, c.intercept) for material, c in artifact.coefficients.items()}
        return cls(artifact.model_name, coefficients)

    @classmethod
    def load(cls, path=None):
        path = path or lca_settings.LINEAR_MODEL_FILE
        model = cls.from_dict(_read_json(path))
        logger.info("Loaded linear model '%s' for %s from %s",
                    model.model_name, sorted(model.coefficients), path)
        return model

    def predict(self, material, recycled_content):
        if material not in self.coefficients:
            raise ReferenceDataError(f"No linear model coefficients for {material}")
        slope, intercept = self.coefficients[material]
        return slope * recycled_content + intercept


@dataclass(frozen=True)
class Leaf:
    value: float


@dataclass(frozen=True)
class Split:
    feature: str
    threshold: float
    left: 'TreeNode'
    right: 'TreeNode'


TreeNode = Union[Leaf, Split]


def parse_tree(node) -> TreeNode:
    """Build a tree from its exported nested-dict form.

    A node carrying ``value`` is a leaf and its value must lie in [0, 1];
    every other node must carry ``feature``, ``threshold``, ``left`` and
    ``right``.
    """
    if not isinstance(node, dict):
        raise ReferenceDataError(f"Tree node must be an object, got {type(node).__name__}")
    if node.get('value') is not None:
        value = float(node['value'])
        if not 0.0 <= value <= 1.0:
            raise ReferenceDataError(f"Tree leaf value {value} is not a 0-1 recycling fraction")
        return Leaf(value)

    missing = [k for k in ('feature', 'threshold', 'left', 'right') if node.get(k) is None]
    if missing:
        raise ReferenceDataError(f"Internal tree node is missing {missing}")
    return Split(
        feature=str(node['feature']),
        threshold=float(node['threshold']),
        left=parse_tree(node['left']),
        right=parse_tree(node['right']),
    )


def tree_depth(node: TreeNode):
    if isinstance(node, Leaf):
        return 0
    return 1 + max(tree_depth(node.left), tree_depth(node.right))


def encode_features(material, product_type, region, feature_names=TREE_FEATURES):
    """One-hot encode a project; keys outside the feature set stay at 0."""
    features = {name: 0 for name in feature_names}
    for key in (f'material_{material}', f'product_type_{product_type}', f'region_{region}'):
        if key in features:
            features[key] = 1
    return features


class RecyclingRateTree:
    def __init__(self, root: TreeNode, feature_names=TREE_FEATURES):
        self.root = root
        self.feature_names = list(feature_names)

    @classmethod
    def load(cls, path=None):
        path = path or lca_settings.TREE_MODEL_FILE
        tree = cls(parse_tree(_read_json(path)))
        logger.info("Loaded recycling-rate tree (depth %d) from %s", tree_depth(tree.root), path)
        return tree

    def predict(self, features: Dict[str, float]) -> Optional[float]:
        """Walk the tree; None if the input lacks a feature the path needs."""
        node = self.root
        while isinstance(node, Split):
            if node.feature not in features:
                logger.debug("Feature '%s' absent from input, no prediction", node.feature)
                return None
            node = node.left if features[node.feature] <= node.threshold else node.right
        return node.value

    def predict_project(self, material, product_type, region):
        return self.predict(encode_features(material, product_type, region, self.feature_names))


class ImputationModels:
    """Both predictors, loaded together once."""

    def __init__(self, linear_model: LinearEnergyModel, recycling_tree: RecyclingRateTree):
        self.linear_model = linear_model
        self.recycling_tree = recycling_tree

    @classmethod
    def load(cls, models_dir=None):
        models_dir = Path(models_dir) if models_dir else lca_settings.MODELS_DIR
        return cls(
            LinearEnergyModel.load(models_dir / lca_settings.LINEAR_MODEL_FILE.name),
            RecyclingRateTree.load(models_dir / lca_settings.TREE_MODEL_FILE.name),
        )
