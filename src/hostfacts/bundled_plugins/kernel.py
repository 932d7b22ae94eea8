"""Kernel name, release and machine architecture."""

import platform


@hostfacts.plugin("Kernel", provides=["kernel", "kernel/name", "kernel/release", "kernel/machine"])
class Kernel:
    @hostfacts.collect_data()
    def collect_default(self):
        uname = platform.uname()
        self.data["kernel"] = {
            "name": uname.system,
            "release": uname.release,
            "version": uname.version,
            "machine": uname.machine,
        }
