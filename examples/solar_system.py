"""
Solar System
============

Example demonstrating how transforms propagate through a hierarchy: a moon
orbits a planet that orbits a sun, and the moon's world position follows
from rotating its ancestors.
"""

from math import pi

import spatialgfx as sg


scene = sg.Scene(name="scene")

sun = sg.SpatialNode(name="sun")
scene.add(sun)

planet_orbit = sg.Group(name="planet orbit")
sun.add(planet_orbit)

planet = sg.SpatialNode(name="planet")
planet.position = (10, 0, 0)
planet_orbit.add(planet)

moon = sg.SpatialNode(name="moon")
moon.position = (2, 0, 0)
planet.add(moon)

camera = sg.SpatialNode(name="camera")
camera.position = (0, 30, 30)
camera.look_at((0, 0, 0))

for step in range(4):
    scene.update(camera)
    x, y, z = moon.local_to_world((0, 0, 0))
    print(f"step {step}: moon at ({x:6.2f}, {y:6.2f}, {z:6.2f})")
    planet_orbit.node.rotate_y(pi / 2)
    planet.rotate_y(pi)
