"""
Neuro-Flap: Neuroevolution of Small Feed-Forward Controllers

A population of fixed-topology neural networks is evolved with a genetic
algorithm to drive agents in a real-time simulation. The simulation scores
each network; this package turns scores into the next generation.
"""

__version__ = "0.1.0"
