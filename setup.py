from setuptools import find_packages, setup

setup(
    name='fastforest',
    version='0.1.0',
    description='Random forest options, problem specification and training with image feature extraction',
    package_dir={'': 'python'},
    packages=find_packages('python'),
    python_requires='>=3.8',
    install_requires=[
        'numpy',
        'scipy',
        'h5py',
    ],
    extras_require={
        'test': [
            'pytest',
            'hypothesis',
        ],
    },
)
