import h5py
import pytest

# MATLAB writes v7.3 files as HDF5 with a 512 byte user block that starts with this header
_V73_HEADER_TEXT = b'MATLAB 7.3 MAT-file, Platform: GLNXA64, Created on: Thu Jan  1 00:00:00 1970 HDF5 schema 1.00 .'


def _v73_header():
    header = _V73_HEADER_TEXT.ljust(116, b' ') + b'\x00' * 8 + b'\x00\x02IM'
    assert len(header) == 128
    return header


@pytest.fixture
def matlab_v73_file(tmp_path):
    """
    Factory for MATLAB v7.3 files: C{create(name, fill)} calls C{fill} with the open
    L{h5py.File} and returns the filename.
    """
    def create(name, fill):
        filename = str(tmp_path / name)
        with h5py.File(filename, 'w', userblock_size=512) as f:
            fill(f)
        with open(filename, 'r+b') as f:
            f.write(_v73_header())
        return filename
    return create
