# Env module - Track, sensors and car agents
# FORBIDDEN: training.*, logging, any I/O

from .sensor import Sensor, cast_all
from .track import Track, COURSES
from .car import Car
