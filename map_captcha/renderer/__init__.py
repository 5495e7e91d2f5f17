"""Rendering subpackage.

Turns a completed capture into a single image:

* :mod:`map_captcha.renderer.palette` decodes per-pixel color indices to RGBA.
* :mod:`map_captcha.renderer.compositor` rotates and places decoded tiles on
  an opaque canvas.

Pillow handles the images; NumPy does the vectorized palette lookup.
"""
