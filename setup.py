"""
Packaging for the telemetry relay.

    pip install -e .[test]
"""

from setuptools import setup


setup(
    name='triprelay',
    version='0.1.0',
    description='Relays sensor telemetry and robot commands between a serial device and WebSocket clients.',
    url='',
    author='',
    author_email='',
    license='MIT',
    package_dir={'': 'src'},
    packages=['triprelay', 'triprelay.conduit', 'triprelay.config', 'triprelay.connector',
              'triprelay.protocol', 'triprelay.support'],
    python_requires='>=3.8',
    install_requires=[
        'pyserial>=3.4',
        'configobj>=5.0.6',
        'websockets>=12.0',
    ],
    extras_require={
        'test': [
            'pytest',
            'PyHamcrest',
            'timeout-decorator',
        ],
    },
    entry_points={
        'console_scripts': [
            'triprelay = triprelay.main:main',
        ],
    },
    zip_safe=False,
)
