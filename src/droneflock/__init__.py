"""Boids flocking over a uniform spatial grid."""
