# labanalyser

This package holds the data model and file formats of a plugin-based tool that
collects, changes and views laboratory data. Devices publish named values such as
`Device::Channel::Gain`, and each value has a fixed kind. Experiments are saved
as XML. Running values can be read and set over a small binary TCP protocol.
The package uses only the standard library.

## Modules

- `labanalyser.kinds`
  - `ValueKind` lists the value kinds:
    - signed and unsigned integers of 8 to 64 bits
    - `float`, `double` and `bool`
    - strings and string lists
    - `GuiSelection`, a chosen entry plus its options
    - `DataPair`, time and value series plus an extra scalar
  - `convert` casts a scalar to a kind. Integers wrap to their width, and `float` becomes single precision.
  - `parse_text` reads text as a kind. Text that cannot be read gives zero.
  - `format_value` renders a value as text.
  - `default_value` gives the value a kind is reset to.
  - `kind_from_name` looks a kind up by its name.
- `labanalyser.interface_data.InterfaceData` holds one typed value. It also carries:
  - its declared type name,
  - its role (`type`: `Parameter`, `Data` or `State`),
  - its state dependency.

  Only parameters are editable (`is_editable`). The methods are:
  - `set_value` stores a value as a given kind.
  - `set_keep_type` converts a value to the kind already held:
    - text given to a string list is appended to it,
    - text given to a selection becomes the selected entry.
  - `set_text` stores text as a string when nothing is held yet. Otherwise it keeps the kind.
  - `reset_to_type` declares a type name and resets the value to that kind's default.
  - `get` returns the value only when it is held as the kind asked for. Otherwise it raises `TypeError`.
- `labanalyser.plugin`
  - `parse_device` and `parse_device_file` read device description files. The root element is `LEDevice`, with the attributes `DevicePlugin` and `DeviceName`. Problems raise `DeviceFileError`.
  - A device is a `PlatformInterface`. It offers `get_symbol` and `message_receiver`.
  - A `PlatformFactory` creates devices. Factories are registered in a `PluginRegistry` under the plugin name a device file gives.
  - `PluginLoader.load` creates each named device once, and returns `None` when that name is already loaded. `PluginLoader.device` looks devices up by name, and `device_paths` lists the device files in the order they were loaded.
- `labanalyser.remote_control` implements the remote-control protocol.
  - `RemoteControlServer` serves `get` and `set` requests for the entries in a mapping of IDs to `InterfaceData`.
  - It listens on `127.0.0.1` and tries ports from 4080 upward until one is free.
  - Updates from `set` go to an optional message sender. Without one, they are stored back into the mapping.
- `labanalyser.experiment` describes an experiment with the dataclasses `Experiment`, `FormEntry`, `FigureWindow`, `WidgetState` and `Connection`. It writes that description as XML:
  - `experiment_to_xml` returns the XML text.
  - `write_experiment` saves it to a file.

  Paths of forms and devices are saved twice: as given, and relative to the experiment file.
- `labanalyser.experiment_reader` reads an experiment back:
  - `parse_experiment` reads XML text, and `read_experiment` reads a file. Both return an `ExperimentLoad`.
  - Forms and devices whose files cannot be found are left out. Every missing form is also listed in `errors`.
  - Text that is not an experiment raises `ExperimentFormatError`.
  - `resolve_path` finds the file an entry names.
- `labanalyser.tree` builds the `::`-separated ID tree (`TreeNode`) shown in an explorer:
  - `item_less` orders items numerically when both are integers, and as text otherwise.
  - `drag_text` produces the text for a drag of the selected leaves.

## Examples

```python
from labanalyser.interface_data import InterfaceData

value = InterfaceData()
value.reset_to_type("int16_t")
value.set_text("42")
print(value.data_type_name())  # int16_t
print(value.as_float())        # 42.0
```

Reading an experiment file:

```python
from labanalyser.experiment_reader import read_experiment

load = read_experiment("measurement.LAexp")
for form in load.experiment.forms:
    print(form.name, form.path)
print(load.errors)
```

Serving values to remote clients:

```python
import asyncio

from labanalyser.interface_data import InterfaceData
from labanalyser.kinds import ValueKind
from labanalyser.remote_control import RemoteControlServer

async def main():
    gain = InterfaceData(type="Parameter")
    gain.set_value(2.5, ValueKind.DOUBLE)
    server = RemoteControlServer({"Device::Gain": gain})
    port = await server.start()
    print("listening on", port)
    await asyncio.sleep(60)
    await server.stop()

asyncio.run(main())
```

## Remote-control frames

### Requests

Every request frame starts with a 15-byte header. All integers in it are
little endian:

1. the total frame length, 4 bytes, header included
2. a three-letter command (`get` or `set`)
3. the length of the ID, 4 bytes, including its terminating zero byte
4. the length of the payload, 4 bytes

After the header come the zero-terminated ID and then the payload.

- `encode_request` builds a frame.
- `FrameBuffer.feed` splits incoming bytes into `Request` objects.
- `RemoteControlServer.handle` carries out one request.

A `set` payload depends on the entry it updates:

- For numeric entries it is one double. The entry keeps its kind.
- For strings it is zero-terminated text.
- For selections it is zero-terminated text. The selection only changes to one of its options.

`apply_set` returns the updated copy.

### Answers to `get`

A `get` answer starts with one flag byte: 0 for numbers, 1 for text. A 32-bit
element count and the elements follow:

- Numbers are sent as doubles.
- Text is zero-padded to eight bytes per character.
- A data pair is sent as its time series followed by its value series.
- An unknown ID is answered with a count of zero.
- Kinds without a wire form are answered with the flag byte alone.

`encode_get_response` builds the answer.

## What the package does not do

There is no graphical interface and no command to run. The package has no
explorer window, plot or figure windows, or form loader. Figure windows, widget
states and the window state are only recorded and read back as data in an
`Experiment`.

Device plugins are Python factories that you register in a `PluginRegistry`.
Nothing is loaded from shared libraries.

The package does not export data to other file formats.