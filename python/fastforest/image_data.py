import numpy as np

from .errors import precondition


def copy_image(src, dest):
    """
    Copy the source image into the destination image, converting to the destination type.

    @param src: A 2-D L{numpy} array
    @param dest: A 2-D L{numpy} array of the same shape as C{src}
    @return: C{dest}
    """
    precondition(src.ndim == 2 and src.shape == dest.shape,
                 "copy_image(): source and destination must be 2-D images of equal size")
    dest[...] = src
    return dest


def copy_image_if(src, mask, dest):
    """
    Copy the source image into the destination image wherever the mask is non-zero. The other
    destination pixels are left untouched.

    @param src: A 2-D L{numpy} array
    @param mask: A 2-D L{numpy} array of the same shape as C{src}
    @param dest: A 2-D L{numpy} array of the same shape as C{src}
    @return: C{dest}
    """
    precondition(src.ndim == 2 and src.shape == dest.shape and src.shape == mask.shape,
                 "copy_image_if(): source, mask and destination must be 2-D images of equal size")
    selected = mask != 0
    dest[selected] = src[selected]
    return dest


def _shifted_window(length, offset):
    # (source slice, destination slice) so that dest[i] = src[i + offset] where both are inside
    return (slice(min(max(0, offset), length), max(length + min(0, offset), 0)),
            slice(min(max(0, -offset), length), max(length - max(0, offset), 0)))


class ImageData(object):
    """
    This class represents labeled image data.

    Labels are assumed to be non-negative integers.
    A label of -1 is considered as a marker for invalid data.
    """

    def __init__(self, data, labels):
        """
        Initialize a new L{ImageData} object.

        @param data: A L{numpy} array of the image data with dimensions (numOfImages x width x height)
        @param labels: A L{numpy} array of the pixel labels with dimensions (numOfImages x width x height)
        @return: A new L{ImageData} object
        """
        precondition(data.ndim == 3, "ImageData(): data must have dimensions (numOfImages x width x height)")
        precondition(data.shape == labels.shape, "ImageData(): data and labels must have the same shape")
        self._data = data
        self._labels = labels

    @property
    def num_of_images(self):
        """
        The number of images
        """
        return self._data.shape[0]

    @property
    def num_of_labels(self):
        """
        The number of distinct valid labels in the data
        """
        return int(np.sum(np.unique(self._labels) >= 0))

    @property
    def image_width(self):
        return self._data.shape[1]

    @property
    def image_height(self):
        return self._data.shape[2]

    @property
    def data(self):
        return self._data

    @property
    def labels(self):
        return self._labels

    def shifted_image(self, image_index, offset, mask=None):
        """
        The image moved by an offset, i.e. the pixel (x, y) of the result holds the pixel
        (x + offset_x, y + offset_y) of the image. Pixels outside of the image read as 0.

        @param offset: A tuple (offset_x, offset_y)
        @param mask: Optional array of dimensions (numOfImages x width x height), pixels of the
                     source image where the mask is zero read as 0 as well.
        @return: A L{numpy} float64 array of dimensions (width x height)
        """
        offset_x, offset_y = offset
        src_x, dest_x = _shifted_window(self.image_width, offset_x)
        src_y, dest_y = _shifted_window(self.image_height, offset_y)
        shifted = np.zeros((self.image_width, self.image_height), dtype=np.float64)
        image = self._data[image_index]
        if mask is None:
            copy_image(image[src_x, src_y], shifted[dest_x, dest_y])
        else:
            copy_image_if(image[src_x, src_y], mask[image_index][src_x, src_y], shifted[dest_x, dest_y])
        return shifted

    def create_feature_matrix(self, offsets, mask=None):
        """
        Create the training data for the random forest from the images.

        Every valid pixel becomes a row, every offset a column holding the value of the pixel at that
        offset.

        @param offsets: A sequence of (offset_x, offset_y) tuples
        @param mask: Optional array of dimensions (numOfImages x width x height), see L{shifted_image}
        @return: A tuple of the L{numpy} feature array (numOfValidPixels x numOfOffsets) and the
                 L{numpy} array of the pixel labels.
        """
        offsets = list(offsets)
        precondition(len(offsets) > 0, "ImageData.create_feature_matrix(): at least one offset is required")
        if mask is not None:
            precondition(mask.shape == self._data.shape,
                         "ImageData.create_feature_matrix(): mask must have the same shape as the data")
        feature_list = []
        label_list = []
        for i in range(self.num_of_images):
            valid = self._labels[i] >= 0
            columns = [self.shifted_image(i, offset, mask)[valid] for offset in offsets]
            feature_list.append(np.column_stack(columns))
            label_list.append(self._labels[i][valid])
        return np.vstack(feature_list), np.hstack(label_list)


class ImageDataReader(object):
    """
    This class provides functions for reading L{ImageData} from MATLAB .mat files
    (the HDF5 format for large files is also supported).

    The saved files are assumed to contain MATLAB arrays of dimension (numOfImages x width x height).
    The actual memory layout is in Fortran-mode for the non-HDF5 MATLAB .mat files,
    so the transpose of the data is taken.
    """

    @staticmethod
    def read_from_matlab_file(matlab_file, data_var_name='data', labels_var_name='labels'):
        """
        Read image data from a MATLAB .mat file.

        @param matlab_file: Filename of the MATLAB .mat file
        @param data_var_name: Variable name of the image data array
        @param labels_var_name: Variable name of the pixel labels array
        @return: A new L{ImageData} object of the corresponding data.
        """
        try:
            import scipy.io
            mat_dict = scipy.io.loadmat(matlab_file, variable_names=(data_var_name, labels_var_name))
            mat_data = mat_dict[data_var_name].T
            mat_labels = mat_dict[labels_var_name].T
        except NotImplementedError:
            import h5py
            with h5py.File(matlab_file, 'r') as f:
                mat_data = f[data_var_name][()]
                mat_labels = f[labels_var_name][()]
        data = np.ascontiguousarray(mat_data, dtype=np.float64)
        labels = np.ascontiguousarray(mat_labels, dtype=np.int64)
        return ImageData(data, labels)
