# opmonred

The title screen of OPMon Red. It is an animated main menu with a pulsing
title, drifting background particles and four buttons: New Game, Load Game,
Settings and Quit. The package also ships small image encoders for PNG, BMP,
TGA, Radiance HDR and baseline JPEG. The encoders use only the standard
library.

## Installing

```
pip install .
```

To run the tests, install the `test` extra:

```
pip install ".[test]"
pytest
```

## Starting the menu

```
opmonred
```

This opens a 1280×720 window. A button grows while the pointer is over it.
Clicking a button prints that button's message to standard output.

To leave the menu, do any of these:

- press Escape
- close the window
- click Quit

The menu loads `arial.ttf` and `Mplus1-Regular.ttf` from `assets/fonts/`,
relative to the working directory. If either font is missing, it prints a
warning and uses pygame's default font.

## What the menu does not do

The menu is only a title screen:

- **New Game** prints a message. There is no game world, character selection or gameplay behind it.
- **Load Game** prints a message. Nothing is saved or loaded.
- **Settings** prints a message. There is no settings screen.
- **Quit** prints a message and then closes the menu.

## Using the pieces

`opmonred.menu.MainMenuScene` takes a pygame surface and, optionally, a `random.Random` instance. Its methods are:

- `run()` runs the frame loop.
- `handle_event(event)` processes a single event.
- `update(mouse_pos)` updates the buttons.
- `update_animations(delta_time)` advances the title pulse and the particles.
- `render()` draws the scene.

After a button is clicked, `last_action` holds a `MenuAction` for that button.

`opmonred.button.Button` works on any pygame surface:

```python
import pygame
from opmonred.button import Button

pygame.init()
screen = pygame.display.set_mode((400, 200))
font = pygame.font.Font(None, 28)
button = Button("Play", font, 75, 70, 250, 60)
button.set_colors((60, 120, 180, 220), (80, 140, 200, 240), (40, 100, 160, 255))
button.on_click = lambda: print("clicked")
button.update(pygame.mouse.get_pos(), 1 / 60)
button.handle_click(pygame.mouse.get_pos())
button.draw(screen)
```

## Writing images

Pixel data is a flat `bytes` object. Rows run from top to bottom, and each pixel has `comp` interleaved 8-bit channels:

- 1 = grey
- 2 = grey and alpha
- 3 = RGB
- 4 = RGBA

The `encode_*` functions return the file contents. The `write_*` functions save the file to a path. Invalid sizes, component counts or data that is too short raise `ValueError`.

```python
from opmonred.pngwrite import encode_png, write_png
from opmonred.rasterfiles import encode_bmp, write_tga
from opmonred.jpegwrite import write_jpg

pixels = bytes([255, 0, 0, 0, 255, 0, 0, 0, 255, 255, 255, 255])  # 2x2 RGB
png = encode_png(pixels, 2, 2, 3)
write_png("tiny.png", pixels, 2, 2, 3)
bmp = encode_bmp(2, 2, 3, pixels)
write_tga("tiny.tga", 2, 2, 3, pixels)
write_jpg("tiny.jpg", 2, 2, 3, pixels, quality=90)
```

### PNG (`opmonred.pngwrite`)

`encode_png` and `write_png` accept these options:

- `stride`: the number of bytes between rows.
- `compression_level`: the hash-chain length.
- `force_filter`: a row filter from 0 to 4.
- `flip_vertically`

The module also provides `zlib_compress`, `crc32` and `paeth`.

### BMP, TGA and HDR (`opmonred.rasterfiles`)

- BMP: 4-component images are written as 32-bit files with an alpha mask. Other images are written as 24-bit files.
- TGA: output is run-length encoded unless `rle=False` is passed.
- HDR: `encode_hdr` and `write_hdr` take linear floating-point values instead of bytes.

The module also provides `linear_to_rgbe`.

### JPEG (`opmonred.jpegwrite`)

Quality is clamped to 1–100, and 0 means 90. At quality 90 and below, chroma is subsampled 2×2. Alpha channels are ignored. `quantization_tables(quality)` returns the luminance and chrominance tables.

### Flipping

Every encoder accepts `flip_vertically`.