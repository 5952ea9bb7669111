# dotmatrix

Building blocks for an emulator of an 8-bit handheld game console with a
dot-matrix screen, in plain Python with no third-party dependencies.

## What is inside

| Module | What it does |
| --- | --- |
| `dotmatrix.rcvars` | Named configuration variables (`RcRegistry`, `RcVar`, `RcType`), the integer parser they use (`parse_int`), defaults for `rcpath` and `savedir` (`init_paths`), backslash-to-slash path clean-up (`sanitize_path`) and a microsecond `Stopwatch`. |
| `dotmatrix.split` | A shell-like word splitter with double quotes and backslash escapes (`iter_words`, `split_line`). |
| `dotmatrix.rtc` | The cartridge real-time clock (`Rtc`): latching, register writes, ticking, and saving/loading its state as text, catching up on the time that passed in between. |
| `dotmatrix.refresh` | Turning a line of palette indices into colours, optionally repeated per pixel (`refresh`, `refresh_packed24`). |
| `dotmatrix.pcm` | The unsigned 8-bit PCM output buffer (`Pcm`, `AudioSpec`, `buffer_samples`); full buffers go to a `sink` callable. |
| `dotmatrix.sound` | The four-channel sound unit (`Sound`, `Channel`): register reads and writes, wave memory, and mixing samples into a `Pcm`. |
| `dotmatrix.xzformat` | Constants and checks of the `.xz` container: magic bytes, check types (`XzCheck`, `check_type`), modes (`XzMode`) and error classes. |
| `dotmatrix.savestate` | Reading and writing block-structured save-state files (`MachineState`, `save_state`, `load_state`), including older files that store registers individually. |
| `dotmatrix.link` | The serial port registers and the link handler interface (`SerialBus`, `LinkHandler`, `NoLink`, `SendMode`). |
| `dotmatrix.link_pipe` | A link cable between two local instances over a pair of named pipes (`PipeLink`, `pipe_paths`, `LinkError`). |
| `dotmatrix.link_network` | A link cable over TCP (`NetworkLink`, `LinkAddress`, `parse_link_address`) and choosing a link from a spec string (`setup_link`). |
| `dotmatrix.display` | Frame buffer layouts (`FrameBuffer`, `ChannelShift`, `make_rgb32_framebuffer`, `make_rgb565_framebuffer`) and window sizing (`VideoConfig`, `window_size`). |
| `dotmatrix.input` | Joypad keys and events, controller button mapping, left-stick to d-pad conversion, rumble levels and change-only button polling (`Key`, `Event`, `map_controller_button`, `AxisTracker`, `ButtonPoller`, `JoyConfig`, `rumble_level`). |

## Examples

Integers may be decimal, octal (leading `0`) or hexadecimal (leading `0x`):

```python
from dotmatrix.rcvars import parse_int

parse_int("0x1F")   # 31
parse_int("017")    # 15
parse_int("-12")    # -12
```

Configuration variables:

```python
from dotmatrix.rcvars import RcRegistry, RcType, RcVar

registry = RcRegistry()
registry.export_all([
    RcVar("sound", RcType.BOOL),
    RcVar("vmode", RcType.VECTOR, length=3),
])
registry.set("sound", ["yes"])
registry.set("vmode", ["320", "288"])
registry.get_int("sound")      # 1
registry.get_vector("vmode")   # [320, 288, 0]
```

Splitting a line into words, honouring quotes:

```python
from dotmatrix.split import iter_words

list(iter_words('bind "my key" +up'))   # ['bind', 'my key', '+up']
```

Running the real-time clock and keeping its state between sessions:

```python
import io
import time

from dotmatrix.rtc import Rtc

clock = Rtc()
for _ in range(60):
    clock.tick()

buffer = io.StringIO()
clock.save(buffer, int(time.time()))

restored = Rtc()
buffer.seek(0)
restored.load(buffer, int(time.time()))
```

Generating sound into a PCM buffer:

```python
from dotmatrix.pcm import Pcm
from dotmatrix.sound import NR12, NR14, Sound

chunks = []
pcm = Pcm(sink=chunks.append)
pcm.open()                    # 11025 Hz mono buffer of 4096 samples
sound = Sound(pcm)
sound.write(NR12, 0xF0)       # full volume
sound.write(NR14, 0x87)       # start channel 1
sound.advance(70224)          # cycles of one frame
sound.mix()
```

Saving a machine snapshot:

```python
import io

from dotmatrix.savestate import MachineState, load_state, save_state

state = MachineState(ram_banks=1)
state.values["PC"] = 0x0150
stream = io.BytesIO()
save_state(stream, state)

copy = MachineState(ram_banks=1)
load_state(stream, copy)
```

Choosing a link cable: `pipe:PATH`, `network:LOCALPORT:HOST:REMOTEPORT`,
or an empty string for no link:

```python
from dotmatrix.link import SerialBus
from dotmatrix.link_network import setup_link

bus = SerialBus()
with setup_link("", bus) as link:
    link.send(0x42)
bus.sb   # 0xFF: nothing is attached
```

A frame buffer for a 32-bit window:

```python
from dotmatrix.display import make_rgb32_framebuffer

fb = make_rgb32_framebuffer(160, 144)
fb.pack(255, 128, 0)   # 0xFF8000
```

## What it does not do

This package holds components, not a whole emulator. It has no CPU,
memory map, cartridge or ROM loading, and no graphics renderer; there is
no command to start, and nothing opens a window, plays audio on a
device or reads a keyboard or controller. `Pcm` only hands full buffers
to a callable, `FrameBuffer` only describes pixel memory, and the input
module only turns readings you feed it into events. `xzformat` has the
`.xz` container's constants and checks, but no decompressor.

The pipe and network links use `os.mkfifo` and `select.poll`, so they
work on POSIX systems only.

## Running the tests

Install the package with its `test` extra and run `pytest` from the
project directory.