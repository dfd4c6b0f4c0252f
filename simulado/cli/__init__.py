"""
Command-line front end for simulado-cli.

Usage:
    simulado build -n 25 -t 60
    simulado take
    simulado history
"""
