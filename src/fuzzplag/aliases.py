from fuzzplag.core.models import DistanceMetric

DISTANCE_METRIC_ALIASES = {
    "tlsh": DistanceMetric.TLSH,
    "hamming": DistanceMetric.HAMMING,
}

DISTANCE_METRIC_CHOICES = list(DISTANCE_METRIC_ALIASES.keys())

DISTANCE_METRIC_HELP_TEXT = (
    "How two fingerprints are compared:\n"
    "  tlsh     : TLSH difference score (recommended)\n"
    "  hamming  : Character Hamming distance between digest strings\n"
    "Overrides 'distance-metric' from the config file."
)

FORMAT_CHOICES = ["csv", "text"]

EPILOG_TEXT = """
Examples:
  Run with ./conf/config.yaml or ./config.yaml
  %(prog)s

  Use another config and archive, write a CSV report
  %(prog)s -c course.yaml -i submissions.zip -o suspects.csv

  Same as above with 8 workers and a readable table
  %(prog)s -c course.yaml -i submissions.zip -o suspects.txt --format text -j 8

  Also fingerprint loose files sitting directly in the root archive
  %(prog)s -i submissions.zip --top-level-leaves

Minimal config.yaml:
  input:
    path: submissions.zip
  output:
    path: result.csv
  smallfile-threshold: 256
  parallel: 4
  distance-threshold: 30
  accept-patterns: ['\\.c$', '\\.py$']
  ignore-patterns: ['__MACOSX']
"""
