# edgebreaker

Connectivity compression for triangle meshes using the Edgebreaker
algorithm. Meshes are read and written as Wavefront OBJ text; the compressed
form is also an OBJ file, in which the face list is replaced by a bit-packed
encoding of the traversal history and two small side tables.

## Installation

```
pip install .
```

The package has no dependencies outside the standard library.

## Command line

```
edgebreaker compress -i mesh.obj -o mesh.ebo
edgebreaker decompress -i mesh.ebo -o restored.obj
```

The same command is available as `python -m edgebreaker.cli`.

An operation is accepted if it is a prefix of `compression` or
`decompression`, so `c`, `comp`, `compress`, `d` and `dec` all work.

Flags:

- `-i <file>` – input file (defaults to standard input)
- `-o <file>` – output file (defaults to standard output)
- `-v` – verbose output: debug messages are logged to standard error

Single-letter flags can be combined, e.g. `-vi mesh.obj`. Unknown flags and
arguments are reported on standard error and skipped. Without an operation,
usage help is printed to standard error.

Log lines have the form `[LEVEL:file:line] message`, with a coloured level
tag; set the `NO_COLOR` environment variable to turn colour off.

The exit status is 0 on success and 1 when the input file cannot be opened,
the output file cannot be created, or the mesh or encoded stream is invalid.

## Compressed file format

Besides the usual `v x y z` vertex lines, a compressed file contains:

- `ebh <base64> <pad>` – the operation history, bit-packed (`C` as `0`,
  `S`/`H`/`M` as `100`, `R` as `101`, `L` as `110`, `E` as `111`) and base64
  encoded without `=` padding; `<pad>` is the number of unused trailing bits.
- `ebt ...` – one entry per hole or merge. A hole is `splits/length`, a merge
  is `splits/position/offset/length`. `splits` counts the `100` codes that
  are real splits before the entry, which is how `H` and `M` are told apart
  from `S`.
- `ebd pos/idx ...` – positions in the vertex order that reuse the vertex
  first written at position `idx` (both 0-based).

Compression reorders the vertices into traversal order and drops the `f`
lines. Decompression rebuilds the triangles against that new vertex order,
so the restored mesh has the same surface but its vertex numbering differs
from the original file.

## Library use

```python
from edgebreaker.objfile import Obj
from edgebreaker.codec import compress_obj, decompress_obj

with open("mesh.obj") as stream:
    mesh = Obj.read(stream)

compress_obj(mesh)          # mesh.faces is now empty; history/table/dup filled
with open("mesh.ebo", "w") as stream:
    mesh.write(stream)

decompress_obj(mesh)        # faces are rebuilt from the encoded connectivity
```

`Obj` holds `vertices`, `faces` (1-based index triples), `eb_history`,
`eb_table` (a list of `Hole` and `Merge` entries) and `eb_dup`.

The lower-level pieces are also available:

- `edgebreaker.ops` – `Op`, `encode_history(ops)` and
  `decode_history(encoded, pad)`.
- `edgebreaker.compression` – `HalfEdges(vertex_count, faces)` and
  `compress(he)`, which returns an `EdgeBreaker` record.
- `edgebreaker.decompression` – `decompress(eb)`, which returns the
  triangles as 1-based vertex id triples.
- `edgebreaker.model` – the `EdgeBreaker` record and `EdgeBreakerError`, a
  `ValueError` raised for meshes and streams that cannot be processed.

## What it does not do

- Only vertex positions and face connectivity are kept. Texture coordinates
  and normals (`vt`, `vn`) are ignored, and face entries such as `1/2/3` keep
  only the vertex index.
- Polygons are split into triangle fans when read; the output always
  contains triangles.
- Vertex positions are written as they are; they are not quantised or
  compressed.
- A mesh with no faces cannot be compressed.

## Running the tests

```
pip install .[test]
pytest
```