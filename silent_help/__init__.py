"""
Silent Help safety & privacy core.

- lib: encryption codec, AI output filter, lexicons, logging setup
- services: crisis detection, hazard log, composing pipeline
"""
