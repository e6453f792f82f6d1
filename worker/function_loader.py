#!/usr/bin/env python3
"""
Dynamic Function Loader for MapReduce Jobs
Loads job modules containing map, reduce, combiner and record reader functions
"""

import importlib
import importlib.util
import os
import sys


class FunctionLoader:
    """Loads job functions from a Python file or an importable module"""

    def __init__(self, map_reduce_file: str):
        """
        Initialize the function loader

        Args:
            map_reduce_file: Path to a job's .py file, or a dotted module name
                such as 'jobs.market_cap'
        """
        self.map_reduce_file = map_reduce_file
        self.module = None

    def load_module(self):
        """
        Load the job module

        Returns:
            The loaded module object

        Raises:
            FileNotFoundError: If a .py path is given and the file doesn't exist
            ModuleNotFoundError: If a module name is given and it can't be imported
        """
        if self.map_reduce_file.endswith('.py') or os.path.sep in self.map_reduce_file:
            self.module = self._load_from_file()
        else:
            self.module = importlib.import_module(self.map_reduce_file)
        return self.module

    def _load_from_file(self):
        if not os.path.exists(self.map_reduce_file):
            raise FileNotFoundError(f"Job file not found: {self.map_reduce_file}")

        stem = os.path.splitext(os.path.basename(self.map_reduce_file))[0]
        module_name = f"mapreduce_job_{stem}"
        spec = importlib.util.spec_from_file_location(module_name, self.map_reduce_file)
        if spec is None or spec.loader is None:
            raise ImportError(f"Failed to load job file: {self.map_reduce_file}")
        module = importlib.util.module_from_spec(spec)
        sys.modules[module_name] = module
        spec.loader.exec_module(module)
        return module

    def _ensure_loaded(self):
        if not self.module:
            self.load_module()
        return self.module

    def get_map_function(self):
        """
        Get map function from loaded module

        Raises:
            AttributeError: If module doesn't define 'map_function'
        """
        module = self._ensure_loaded()
        if not hasattr(module, 'map_function'):
            raise AttributeError("Module must define 'map_function'")
        return module.map_function

    def get_reduce_function(self):
        """
        Get reduce function from loaded module

        Raises:
            AttributeError: If module doesn't define 'reduce_function'
        """
        module = self._ensure_loaded()
        if not hasattr(module, 'reduce_function'):
            raise AttributeError("Module must define 'reduce_function'")
        return module.reduce_function

    def get_combiner_function(self):
        """
        Get combiner function from loaded module

        Returns:
            The combiner_function callable, or reduce_function as default, or None
        """
        module = self._ensure_loaded()
        if hasattr(module, 'combiner_function'):
            return module.combiner_function
        elif hasattr(module, 'reduce_function'):
            return module.reduce_function
        return None

    def get_record_reader(self):
        """
        Get the function turning an input line into a map input value

        Returns:
            The module's read_record callable, or a pass-through for plain text jobs
        """
        module = self._ensure_loaded()
        return getattr(module, 'read_record', _read_line)

    def get_declared_counters(self) -> tuple:
        """Names of the job counters the module declares in COUNTERS"""
        module = self._ensure_loaded()
        return tuple(getattr(module, 'COUNTERS', ()))


def _read_line(line):
    return line
