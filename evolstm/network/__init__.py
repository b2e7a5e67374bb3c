"""
Evolvable LSTM network genomes: genes, blocks, layers and whole networks.
"""

from .activations import Activation, sigmoid, tanh, identity, clamp, weighted_sum
from .genes import WeightedInputPoint, Neuron
from .block import ForwardState, LSTMBlock
from .layers import LayerType, BaseLayer, LSTMLayer, DenseLayer, layer_from_dict
from .network import Network

__all__ = [
    "Activation",
    "sigmoid",
    "tanh",
    "identity",
    "clamp",
    "weighted_sum",
    "WeightedInputPoint",
    "Neuron",
    "ForwardState",
    "LSTMBlock",
    "LayerType",
    "BaseLayer",
    "LSTMLayer",
    "DenseLayer",
    "layer_from_dict",
    "Network"
]
