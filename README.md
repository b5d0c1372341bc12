# feldspar

Building blocks for a streamed, multi-resolution voxel map. The package has no dependencies
outside the standard library.

## Modules

- `feldspar.units`: `VoxelUnits` and `ChunkUnits` wrap a value to record which space it is
  measured in. Each offers `into_inner`, `map` and `map2`. `map2` raises `TypeError` when
  given two different unit types.
- `feldspar.sdf`: `Sd8` is an 8-bit fixed-precision signed distance in `[-1.0, 1.0]`, with
  `from_float` (which clamps) and `to_float`. `fixed_precision_type(name, bits, max_value)`
  creates types with other widths and ranges. Each type has the constants `MIN`, `MAX`,
  `ZERO`, `RESOLUTION` and `PRECISION`.
- `feldspar.palette`: `Palette8` maps 8-bit ids to values and holds at most 256 entries.
- `feldspar.ndview`: `GridShape` linearizes and delinearizes N-dimensional points, with the
  first axis varying fastest. `NdView` indexes a flat sequence by such points.
- `feldspar.coordinates`: `Extent`, `Sphere` and `CUBE_CORNERS`, plus conversions between
  voxel space, chunk space and octree levels: `chunk_min`, `chunk_extent`,
  `chunk_extent_at_level`, `in_chunk`, `in_chunk_extent`, `ancestor_extent`,
  `descendant_extent`, `min_child_coords`, `parent_coords`, `min_sibling_coords`,
  `child_index`, `children`, `chunk_bounding_sphere` and
  `sphere_intersecting_ancestor_chunk_extent`. Functions that depend on chunk size take
  `chunk_shape_log2`, which is either a single int or one value per axis.
- `feldspar.config`: `StreamingConfig` (with `is_render_candidate`), `RenderConfig`,
  `LoaderConfig` and `MapConfig`. `MapConfig` converts to and from a dict with `to_dict` and
  `from_dict`.
- `feldspar.neighborhood_subdiv`: the lookup tables `NEIGHBORHOODS` and
  `NEIGHBORHOODS_PARENTS`. `generate_neighborhoods()` recomputes both tables, and
  `format_binary3` formats a child index as a binary triplet.
- `feldspar.node`: `NodeState` holds thread-safe state bits: loading, load pending and
  rendering. `ChunkNode` holds a chunk slot that is empty, compressed or decompressed. The
  first reader of a compressed chunk calls its `decompress()` once, and the result is stored
  in place of the compressed chunk.
- `feldspar.sampling`: `OctantKernel(shape)` halves the resolution of a chunk.
  `downsample_sdf` takes the mean of each octant and rescales it by 1/2. `downsample_labels`
  takes the mode of each octant, counted with `OctantModeCounter`. Ties in the mode go to the
  label seen first.
- `feldspar.database`: a versioned chunk database (see below).

## Versioned database

`feldspar.database.storage.Store` is a set of named, key-ordered byte trees. Its
transactions apply all writes together, or none of them if the block raises. `Store()` keeps
the data in memory only. `Store(path)` also saves the data to a JSON file and loads it again
when that file is reopened.

`feldspar.database.map_db.MapDb` is built on a store and works as follows:

- New changes are written to a *working* tree.
- The values they overwrite are moved to a backup tree.
- `commit_working_version` archives the backup under the parent version, links the working
  version into a version graph, and starts a new working version.
- `branch_from_version` replays archived changes along the graph to move to any earlier
  version.

Chunk keys (`ChunkDbKey`) combine a level with a 96-bit Morton code (`Morton3`). Their
13-byte encoding sorts in the same order as the keys. A change (`Change`) is either an insert
of bytes or a removal.

```python
from feldspar.database.storage import Store
from feldspar.database.map_db import MapDb
from feldspar.database.chunk_key import ChunkDbKey
from feldspar.database.change_encoder import Change, ChangeEncoder

store = Store()
db = MapDb.open(store, "mymap")

key = ChunkDbKey.from_coords(1, (0, 0, 0))
encoder = ChangeEncoder()
encoder.add_compressed_change(key, Change.insert(b"compressed chunk bytes"))
db.write_working_version(encoder.encode())

v0 = db.cached_meta().working_version
db.commit_working_version()

encoder = ChangeEncoder()
encoder.add_compressed_change(key, Change.remove())
db.write_working_version(encoder.encode())
db.commit_working_version()

assert db.read_working_version(key) is None
db.branch_from_version(v0)
assert db.read_working_version(key) == Change.insert(b"compressed chunk bytes")
```

A failed version operation raises `feldspar.database.version.TransactionAborted`. Its
`reason` attribute is an `AbortReason`.

## What it does not do

- It contains no octree or clipmap that holds `ChunkNode`s.
- It has no load or render searches over such an octree, and no ray casting.
- It does no mesh generation or rendering.
- It has no importer for voxel model files, and no game-engine integration.

The configuration classes describe settings for those parts, but nothing in the package
acts on them apart from `StreamingConfig.is_render_candidate`. Chunk payloads are opaque
bytes: the package does not define a chunk type and does not compress chunks itself.

## Running the tests

```
pip install .[test]
pytest
```