"""JSON report for programmatic consumption."""
import json
import sys
from datetime import datetime, timezone
from typing import Dict, Optional, TextIO

from codeguardian.analyzer.analysis import AnalysisResult
from codeguardian.analyzer.project_info import ProjectInfo


class JSONReporter:

    def __init__(self, stream: Optional[TextIO] = None):
        self.stream = stream

    def build(self, result: AnalysisResult, project_info: Optional[ProjectInfo] = None) -> Dict:
        return {
            'timestamp': datetime.now(timezone.utc).isoformat(),
            'projectInfo': project_info.to_dict() if project_info else None,
            'result': result.to_dict(),
        }

    def report(self, result: AnalysisResult, project_info: Optional[ProjectInfo] = None) -> str:
        """Write the JSON document to the stream (stdout by default) and return it."""
        output = json.dumps(self.build(result, project_info), indent=2)
        stream = self.stream or sys.stdout
        stream.write(output + '\n')
        return output
