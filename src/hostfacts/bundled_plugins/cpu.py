"""CPU count, plus the model name where /proc/cpuinfo is available."""

import os


@hostfacts.plugin("Cpu", provides=["cpu", "cpu/total"])
class Cpu:
    depends = ["kernel"]

    @hostfacts.collect_data()
    def collect_default(self):
        self.data["cpu"] = {"total": os.cpu_count()}

    @hostfacts.collect_data("linux")
    def collect_linux(self):
        cpu = {"total": os.cpu_count()}
        with open("/proc/cpuinfo", encoding="utf-8") as f:
            for line in f:
                key, _, value = line.partition(":")
                if key.strip() == "model name":
                    cpu["model_name"] = value.strip()
                    break
        self.data["cpu"] = cpu
