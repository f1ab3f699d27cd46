# teeclient

Python building blocks for clients of a Trusted Execution Environment (TEE)
and of the PKCS#11 trusted application that runs inside it. The package
describes the TEE client API and the Cryptoki interface as Python enums,
exceptions and dataclasses, and packs and unpacks the binary structures that
are exchanged with the trusted side. It has no dependencies outside the
standard library.

## Installation

```
pip install .
```

To run the tests:

```
pip install .[test]
pytest
```

## Modules

- `teeclient.teec`: the TEE client API vocabulary. `ParamType`, `MemFlag`,
  `Result`, `ErrorOrigin` and `LoginMethod` are the parameter types, memory
  direction flags, result codes, error origins and login methods.
  `TeecError` carries a non-success result and its origin. `Uuid` identifies
  a trusted application (`from_fields`, `from_bytes`, `to_bytes`, and
  `str()` giving the usual dashed form); `Value` holds two 32-bit integers.
  `param_types()` packs four parameter types into one word and
  `param_type_get()` reads one back out.
- `teeclient.plugin`: `PluginMethod`, a named handler with a `Uuid`, an
  optional init callable (`initialize()`) and an invoke callable (`call()`),
  which takes a command, a sub-command and input bytes and returns bytes.
- `teeclient.bench`: `benchmark_cmd()`, the benchmark UUID and command ids,
  and the shared timestamp layout: `TimeStamp`, `CpuBuffer` (a fixed ring
  of 32 stamps) and `TimestampTable` (a core count followed by one buffer
  per core), each with `pack()` and `unpack()`.
- `teeclient.trace`: `TraceLevel` (ERROR, INFO, DEBUG, FLOW),
  `level_from_config()` mapping a configured level 0 to 4 to a trace level,
  and `Tracer`, whose `emsg`, `imsg`, `dmsg` and `fmsg` write through the
  `logging` logger named by the tracer's prefix and return whether the
  message was written.
- `teeclient.prof`: `profile_path()` and `write_profile()`. They store
  profiling dumps under `<prefix><uuid>[.N].out` in a directory (`/tmp` by
  default). A file id of 0 creates a new file at the first free id, up to
  100, without overwriting; any other id appends to that file. Failures are
  raised as `TeecError`.
- `teeclient.pkcs11_ids`: Cryptoki identifiers as enums: `Attribute`,
  `ObjectClass`, `KeyType`, `CertificateType`, `CertificateCategory`,
  `Mechanism` and `MgfType`, with `is_array_attribute()` and
  `is_vendor_defined()`.
- `teeclient.pkcs11_api`: Cryptoki return values (`ReturnValue`) with
  `check_rv()` and `Pkcs11Error`; the flag sets `MechanismFlag`, `SlotFlag`,
  `TokenFlag`, `SessionFlag` and `InitializeFlag`; `SessionState`,
  `UserType` and `Notification`; and the `Version`, `MechanismInfo` and
  `SessionInfo` records.
- `teeclient.ta_abi`: the little-endian structures of the PKCS#11 trusted
  application's interface: `SlotInfo`, `TokenInfo`, `TaSessionInfo`,
  `TaMechanismInfo`, `AttributeHead` and `ObjectHead`, each with `pack()`
  and `unpack()`. Text fields are padded with spaces.

## Examples

```python
from teeclient.teec import ParamType, Uuid, param_types, param_type_get

types = param_types(ParamType.VALUE_INPUT, ParamType.MEMREF_TEMP_OUTPUT,
                    ParamType.NONE, ParamType.NONE)
assert param_type_get(types, 1) == ParamType.MEMREF_TEMP_OUTPUT

uuid = Uuid.from_fields(0xfd02c9da, 0x306c, 0x48c7,
                        bytes([0xa4, 0x9c, 0xbb, 0xd8, 0x27, 0xae, 0x86, 0xee]))
assert Uuid.from_bytes(uuid.to_bytes()) == uuid
print(uuid)  # fd02c9da-306c-48c7-a49c-bbd827ae86ee
```

```python
from teeclient.pkcs11_ids import Attribute
from teeclient.ta_abi import AttributeHead, ObjectHead

obj = ObjectHead([AttributeHead(Attribute.LABEL, b"my key")])
assert ObjectHead.unpack(obj.pack()) == obj
```

```python
from teeclient.pkcs11_api import Pkcs11Error, check_rv

try:
    check_rv(0x00a0)
except Pkcs11Error as err:
    print(err)  # PIN_INCORRECT (0x000000a0)
```

## What it does not do

The package does not talk to a TEE: it opens no device, holds no context or
session, allocates no shared memory and invokes no commands. It has no
Cryptoki library functions and no command-line tool. It supplies the
identifiers, errors and binary layouts that such a client needs, and leaves
the transport to the caller.